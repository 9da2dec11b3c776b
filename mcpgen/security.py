"""Credential naming and application for declared security schemes.

Each supported scheme maps to environment variables named after the
scheme (upper-cased):

  apiKey  (name N)   -> {SCHEME}_{N}
  http bearer        -> {SCHEME}_BEARERTOKEN
  http basic         -> {SCHEME}_USERNAME, {SCHEME}_PASSWORD

oauth2 and openIdConnect are not applied; operators set a static header
through API_HEADERS instead.
"""

from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generator, Mapping, Sequence

import httpx

from .errors import UnsupportedSecuritySchemeNotice
from .models import SchemeKind, SecurityScheme, ToolDescriptor

log = logging.getLogger(__name__)

API_BASE_URL = "API_BASE_URL"
API_HEADERS = "API_HEADERS"
DEBUG = "DEBUG"


def parse_security_scheme(raw: dict[str, Any]) -> SecurityScheme:
    """Narrow a raw securitySchemes entry to a SecurityScheme."""
    raw = raw or {}
    scheme_type = raw.get("type")

    if scheme_type == "apiKey":
        return SecurityScheme(
            kind=SchemeKind.API_KEY,
            param_name=raw.get("name") or "",
            location=raw.get("in") or "header",
            raw=dict(raw),
        )
    if scheme_type == "http":
        http_scheme = (raw.get("scheme") or "").lower()
        if http_scheme == "bearer":
            return SecurityScheme(kind=SchemeKind.HTTP_BEARER, raw=dict(raw))
        if http_scheme == "basic":
            return SecurityScheme(kind=SchemeKind.HTTP_BASIC, raw=dict(raw))
        return SecurityScheme(kind=SchemeKind.UNSUPPORTED, raw=dict(raw))
    if scheme_type == "oauth2":
        return SecurityScheme(kind=SchemeKind.OAUTH2, raw=dict(raw))
    if scheme_type == "openIdConnect":
        return SecurityScheme(kind=SchemeKind.OPENID_CONNECT, raw=dict(raw))
    return SecurityScheme(kind=SchemeKind.UNSUPPORTED, raw=dict(raw))


def parse_security_schemes(raw_schemes: Mapping[str, Any]) -> dict[str, SecurityScheme]:
    return {name: parse_security_scheme(raw) for name, raw in raw_schemes.items()}


def env_names_for(scheme_name: str, scheme: SecurityScheme | dict[str, Any]) -> list[str]:
    """Environment variables a scheme needs, in the order they are read."""
    if isinstance(scheme, dict):
        scheme = parse_security_scheme(scheme)
    prefix = scheme_name.upper()

    if scheme.kind is SchemeKind.API_KEY:
        return [f"{prefix}_{(scheme.param_name or '').upper()}"]
    if scheme.kind is SchemeKind.HTTP_BEARER:
        return [f"{prefix}_BEARERTOKEN"]
    if scheme.kind is SchemeKind.HTTP_BASIC:
        return [f"{prefix}_USERNAME", f"{prefix}_PASSWORD"]
    return []


def unsupported_notice(scheme_name: str, scheme: SecurityScheme) -> str:
    """Instruction shown for schemes that cannot be applied automatically."""
    scheme_type = scheme.raw.get("type") or scheme.kind.value
    return (
        f"Security scheme {scheme_name!r} ({scheme_type}) is not supported."
        f" Set a static header manually through {API_HEADERS},"
        f" e.g. {API_HEADERS}=Authorization:Bearer <token>"
    )


def environment_contract(schemes: Mapping[str, SecurityScheme]) -> list[str]:
    """Every environment variable an operator of the generated server can set."""
    names = [API_BASE_URL, API_HEADERS]
    for scheme_name, scheme in schemes.items():
        for env_name in env_names_for(scheme_name, scheme):
            if env_name not in names:
                names.append(env_name)
    return names


@dataclass
class CredentialPatch:
    """Headers and query params to add to an outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)

    def update(self, other: CredentialPatch) -> None:
        self.headers.update(other.headers)
        self.params.update(other.params)

    def __bool__(self) -> bool:
        return bool(self.headers or self.params)


def apply_credentials(
    scheme_name: str,
    scheme: SecurityScheme,
    env: Mapping[str, str],
    logger: logging.Logger | None = None,
) -> CredentialPatch:
    """Build the request changes for one scheme from ``env``.

    A missing variable is logged as a warning and yields an empty patch;
    the request goes out without that credential.
    """
    logger = logger or log
    patch = CredentialPatch()

    if scheme.kind is SchemeKind.API_KEY:
        env_name = env_names_for(scheme_name, scheme)[0]
        value = env.get(env_name)
        if not value:
            logger.warning("API Key environment variable not found: %s", env_name)
            return patch
        if scheme.location == "query":
            patch.params[scheme.param_name] = value
        elif scheme.location == "cookie":
            patch.headers["Cookie"] = f"{scheme.param_name}={value}"
        else:
            patch.headers[scheme.param_name] = value
        return patch

    if scheme.kind is SchemeKind.HTTP_BEARER:
        env_name = env_names_for(scheme_name, scheme)[0]
        token = env.get(env_name)
        if not token:
            logger.warning("Bearer Token environment variable not found: %s", env_name)
            return patch
        patch.headers["Authorization"] = f"Bearer {token}"
        return patch

    if scheme.kind is SchemeKind.HTTP_BASIC:
        user_var, password_var = env_names_for(scheme_name, scheme)
        username = env.get(user_var)
        password = env.get(password_var)
        if not (username and password):
            logger.warning("Basic auth credentials not found for %s", scheme_name)
            return patch
        encoded = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        patch.headers["Authorization"] = f"Basic {encoded}"
        return patch

    logger.info("%s", UnsupportedSecuritySchemeNotice(unsupported_notice(scheme_name, scheme)))
    return patch


def credentials_for_requirements(
    security: Sequence[Mapping[str, Sequence[str]]],
    schemes: Mapping[str, SecurityScheme],
    env: Mapping[str, str],
    logger: logging.Logger | None = None,
) -> CredentialPatch:
    """Fold every scheme named in a tool's requirements into one patch.

    Scheme names not declared in ``schemes`` are ignored.
    """
    patch = CredentialPatch()
    for requirement in security:
        for scheme_name in requirement:
            scheme = schemes.get(scheme_name)
            if scheme is None:
                continue
            patch.update(apply_credentials(scheme_name, scheme, env, logger))
    return patch


def parse_api_headers(value: str | None) -> dict[str, str]:
    """Parse API_HEADERS ('key:value,key:value').

    Entries lacking a key or a value are ignored.
    """
    headers: dict[str, str] = {}
    if not value:
        return headers
    for entry in value.split(","):
        key, _, header_value = entry.partition(":")
        key, header_value = key.strip(), header_value.strip()
        if key and header_value:
            headers[key] = header_value
    return headers


@dataclass(frozen=True)
class ServerEnvironment:
    """Runtime settings the generated server reads from its environment."""

    base_url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerEnvironment:
        environ = os.environ if environ is None else environ
        return cls(
            base_url=environ.get(API_BASE_URL, ""),
            headers=parse_api_headers(environ.get(API_HEADERS)),
            debug=environ.get(DEBUG) == "true",
        )


class CredentialAuth(httpx.Auth):
    """httpx auth hook applying a tool's credentials and static headers.

    Usage::

        auth = CredentialAuth(tool, result.security_schemes)
        httpx.Client(base_url=settings.base_url, auth=auth)
    """

    def __init__(
        self,
        tool: ToolDescriptor,
        schemes: Mapping[str, SecurityScheme],
        env: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._tool = tool
        self._schemes = schemes
        self._env = os.environ if env is None else env
        self._log = logger or log

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        for key, value in parse_api_headers(self._env.get(API_HEADERS)).items():
            request.headers[key] = value

        patch = credentials_for_requirements(
            self._tool.security, self._schemes, self._env, self._log,
        )
        request.headers.update(patch.headers)
        if patch.params:
            request.url = request.url.copy_merge_params(patch.params)
        yield request
