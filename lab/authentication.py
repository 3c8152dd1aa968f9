"""
Session authentication for the laboratory API.

DRF's ``SessionAuthentication`` does not send a ``WWW-Authenticate``
header, which makes DRF answer anonymous requests with 403.  The
front-end treats 401 as "go to the login screen", so this subclass
supplies a header value and anonymous requests get a proper 401.
"""
from __future__ import annotations

from rest_framework import authentication


class SessionAuthentication(authentication.SessionAuthentication):
    """Cookie session authentication answering 401 when no session exists."""

    def authenticate_header(self, request) -> str:
        return 'Session'
