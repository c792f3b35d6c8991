"""Contact Book API client.

A small wrapper around the Contact Book REST API built on the
``requests`` library.  It is what scripts and other services use to
talk to the API without dealing with URLs, status codes or the error
body format themselves.

The client exposes one method per operation:

* :meth:`list_contacts` – one page of contacts with pagination metadata.
* :meth:`search_contacts` – one page of contacts matching a query.
* :meth:`iter_contacts` – every contact (or every match), page by page.
* :meth:`get_contact` – a single contact by ID.
* :meth:`create_contact` – create a contact.
* :meth:`update_contact` – partially update a contact.
* :meth:`delete_contact` – delete a contact.
* :meth:`get_stats` – the total number of contacts.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is empty and ``error`` is a dictionary
with the keys ``status_code`` and ``message``.  The message is taken
from the ``error`` field the API puts in every error response.

The client supports optional authentication via an API key which will
be sent in the ``Authorization`` header.  To enable this behaviour,
initialise the client with ``api_key='<your token>'``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

ApiError = Dict[str, Any]


class ContactsAPI:
    """Client for the Contact Book API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = "/api/v1",
        api_key: Optional[str] = None,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            api_prefix: Path under which the versioned API is mounted.
            api_key: Optional API key.  If set, an ``Authorization``
                header with the value ``Bearer <api_key>`` is included
                in all requests.
            timeout: Per-request timeout in seconds.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
        """
        self.base_url = base_url.rstrip("/") + "/" + api_prefix.strip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/contacts``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.  ``data`` is the parsed JSON body
            (``None`` for empty responses such as HTTP 204).
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            # ``Response.__bool__`` is False for error statuses, so
            # compare with None explicitly.
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("error") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Contact operations
    # ------------------------------------------------------------------
    def list_contacts(
        self, page: int = 1, limit: int = 10
    ) -> Tuple[Dict[str, Any], Optional[ApiError]]:
        """Retrieve one page of contacts.

        Returns:
            A tuple ``(result, error)``.  ``result`` has the keys
            ``contacts`` and ``pagination``; it is empty on failure.
        """
        data, error = self._request("GET", "/contacts", params={"page": page, "limit": limit})
        if error:
            return {}, error
        return data or {}, None

    def search_contacts(
        self, query: str, page: int = 1, limit: int = 10
    ) -> Tuple[Dict[str, Any], Optional[ApiError]]:
        """Search contacts by name, e‑mail or phone.

        Returns:
            A tuple ``(result, error)`` shaped like :meth:`list_contacts`.
        """
        data, error = self._request(
            "GET",
            "/contacts/search",
            params={"q": query, "page": page, "limit": limit},
        )
        if error:
            return {}, error
        return data or {}, None

    def iter_contacts(self, query: Optional[str] = None, limit: int = 100) -> Iterator[Dict[str, Any]]:
        """Yield every contact, or every match for ``query``, across all pages.

        Raises ``RuntimeError`` if a page cannot be fetched.
        """
        page = 1
        while True:
            if query:
                result, error = self.search_contacts(query, page=page, limit=limit)
            else:
                result, error = self.list_contacts(page=page, limit=limit)
            if error:
                raise RuntimeError(f"Failed to fetch page {page}: {error['message']}")
            yield from result.get("contacts", [])
            if not result.get("pagination", {}).get("hasNextPage"):
                return
            page += 1

    def get_contact(self, contact_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Retrieve a single contact by ID."""
        return self._request("GET", f"/contacts/{contact_id}")

    def create_contact(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Create a contact.

        Returns:
            A tuple ``(contact, error)``.  A duplicate e‑mail is
            reported as an error with status code 400.
        """
        payload: Dict[str, Any] = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
        }
        if phone is not None:
            payload["phone"] = phone
        return self._request("POST", "/contacts", json_body=payload)

    def update_contact(
        self, contact_id: int, changes: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        """Partially update a contact.

        Args:
            contact_id: Identifier of the contact.
            changes: Fields to change, using the API's camelCase names.
        """
        return self._request("PATCH", f"/contacts/{contact_id}", json_body=changes)

    def delete_contact(self, contact_id: int) -> Tuple[bool, Optional[ApiError]]:
        """Delete a contact.

        Returns:
            A tuple ``(success, error)``.
        """
        _, error = self._request("DELETE", f"/contacts/{contact_id}")
        if error:
            return False, error
        return True, None

    def get_stats(self) -> Tuple[Optional[int], Optional[ApiError]]:
        """Return the total number of stored contacts."""
        data, error = self._request("GET", "/contacts/stats")
        if error:
            return None, error
        return (data or {}).get("totalContacts"), None
