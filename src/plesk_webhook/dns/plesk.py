"""Plesk DNS provider — create/delete TXT records via the Plesk XML API."""

from __future__ import annotations

import logging

import httpx
from lxml import etree

from plesk_webhook.dns.base import DnsProvider, DnsProviderError

logger = logging.getLogger(__name__)

_AGENT_PATH = "/enterprise/control/agent.php"
_CHALLENGE_HOST = "_acme-challenge"

# Responses never need DTDs or external entities
_RESPONSE_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)


def _packet(operation: str, fields: list[tuple[str, str]]) -> bytes:
    """Build ``<packet><dns><operation>...</operation></dns></packet>``.

    Field names containing ``/`` produce nested elements (``filter/id``).
    """
    packet = etree.Element("packet")
    op = etree.SubElement(etree.SubElement(packet, "dns"), operation)
    for path, value in fields:
        parent = op
        *parents, leaf = path.split("/")
        for name in parents:
            parent = etree.SubElement(parent, name)
        etree.SubElement(parent, leaf).text = value
    return etree.tostring(packet, xml_declaration=True, encoding="UTF-8")


def _check_status(node: etree._Element) -> None:
    if node.findtext("status") == "ok":
        return
    errtext = node.findtext("errtext") or "Unknown Plesk error"
    errcode = node.findtext("errcode")
    raise DnsProviderError(errtext, code=int(errcode) if errcode and errcode.isdigit() else None)


class PleskDnsProvider(DnsProvider):
    """DNS provider backed by the Plesk XML API of a single site."""

    def __init__(
        self,
        url: str,
        site_id: str,
        username: str,
        password: str,
        _http_client: httpx.Client | None = None,
    ) -> None:
        self._endpoint = url.rstrip("/") + _AGENT_PATH
        self._site_id = site_id
        self._client = _http_client or httpx.Client(
            headers={
                "HTTP_AUTH_LOGIN": username,
                "HTTP_AUTH_PASSWD": password,
                "Content-Type": "text/xml",
            },
            timeout=30,
        )

    def _call(self, operation: str, fields: list[tuple[str, str]]) -> etree._Element:
        """POST one DNS operation and return its ``result`` element."""
        try:
            resp = self._client.post(self._endpoint, content=_packet(operation, fields))
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise DnsProviderError(f"Plesk API request failed: {exc}") from exc

        try:
            root = etree.fromstring(resp.content, parser=_RESPONSE_PARSER)
        except etree.XMLSyntaxError as exc:
            raise DnsProviderError(f"Invalid XML from Plesk API: {exc}") from exc

        # Authentication and packet-level failures come back in a system block
        system = root.find("system")
        if system is not None:
            _check_status(system)

        result = root.find(f"dns/{operation}/result")
        if result is None:
            raise DnsProviderError(f"Plesk response has no result for {operation}")
        _check_status(result)
        return result

    def add_challenge(self, token: str) -> str:
        result = self._call(
            "add_rec",
            [
                ("site-id", self._site_id),
                ("type", "TXT"),
                ("host", _CHALLENGE_HOST),
                ("value", token),
            ],
        )
        record_id = result.findtext("id")
        if not record_id:
            raise DnsProviderError("Plesk did not return a record id")
        logger.info("Created TXT record %s (id %s) for Plesk site %s", _CHALLENGE_HOST, record_id, self._site_id)
        return record_id

    def remove_challenge(self, record_id: str) -> None:
        self._call("del_rec", [("filter/id", record_id)])
        logger.info("Deleted TXT record id %s from Plesk site %s", record_id, self._site_id)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
