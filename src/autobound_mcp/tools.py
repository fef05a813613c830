"""Tool adapters: input models, endpoint configs and request mapping per tool."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Literal, Mapping, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    TypeAdapter,
    ValidationError,
)

from autobound_config.settings import (
    AUTOBOUND_API_KEY,
    PREDICTLEADS_API_KEY,
    PREDICTLEADS_API_TOKEN,
    YOUCOM_API_KEY,
    Credentials,
    ProviderUrls,
)
from autobound_mcp.endpoints import CredentialBinding, EndpointConfig, ProviderEndpoint, QueryParams
from autobound_mcp.http_client import HttpClient


# ---------------------------------------------------------------------------
# Shared argument types (used by the input models and the MCP signatures)
# ---------------------------------------------------------------------------

_URL = TypeAdapter(AnyUrl)


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"invalid email address: {e}") from e
    return value


def _check_url(value: str) -> str:
    try:
        _URL.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"invalid URL: {e.errors()[0]['msg']}") from e
    # forward the caller's string untouched; AnyUrl would normalize it
    return value


Email = Annotated[str, AfterValidator(_check_email)]
Url = Annotated[str, AfterValidator(_check_url)]
NonEmptyStr = Annotated[str, Field(min_length=1)]
Freshness = Literal["day", "week", "month", "year"]
SafeSearch = Literal["off", "moderate", "strict"]
# no bool or numeric-string coercion
Number = Union[StrictInt, StrictFloat]


# ---------------------------------------------------------------------------
# Endpoint configs
# ---------------------------------------------------------------------------


def autobound_config(base_url: str) -> EndpointConfig:
    return EndpointConfig(
        provider="Autobound",
        base_url=base_url,
        method="POST",
        credentials=(CredentialBinding(AUTOBOUND_API_KEY, "header", "X-API-KEY"),),
        error_field="message",
        json_body=True,
    )


def predictleads_config(base_url: str) -> EndpointConfig:
    return EndpointConfig(
        provider="PredictLeads",
        base_url=base_url,
        method="GET",
        credentials=(
            CredentialBinding(PREDICTLEADS_API_KEY, "query", "api_key"),
            CredentialBinding(PREDICTLEADS_API_TOKEN, "query", "api_token"),
        ),
        error_field="message",
    )


def youcom_config(base_url: str) -> EndpointConfig:
    return EndpointConfig(
        provider="You.com",
        base_url=base_url,
        method="GET",
        credentials=(CredentialBinding(YOUCOM_API_KEY, "header", "X-API-Key"),),
        error_field="detail",
    )


PREDICTLEADS_RESERVED_KEYS = predictleads_config("").query_keys


def _check_extra_query(value: dict[str, Any]) -> dict[str, Any]:
    clash = sorted(k for k in value if k in PREDICTLEADS_RESERVED_KEYS)
    if clash:
        raise ValueError(f"query must not set credential parameters: {', '.join(clash)}")
    return value


ExtraQuery = Annotated[dict[str, Any], AfterValidator(_check_extra_query)]


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class InsightsInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    contactEmail: Email | None = None
    contactLinkedinUrl: Url | None = None
    contactCompanyUrl: Url | None = None
    userEmail: Email | None = None
    userLinkedinUrl: Url | None = None
    userCompanyUrl: Url | None = None
    insightSubtype: str | list[str] | None = None


class PredictLeadsInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: NonEmptyStr
    query: ExtraQuery | None = None


class YouSearchInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: NonEmptyStr
    numWebResults: Number | None = None
    freshness: Freshness | None = None
    country: str | None = None
    safesearch: SafeSearch | None = None


# ---------------------------------------------------------------------------
# Request mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutboundCall:
    path: str = ""
    params: QueryParams = ()
    body: Any | None = None


def format_number(value: int | float) -> str:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify_query_value(value: Any) -> str:
    """Render an arbitrary JSON value as a query-string value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_query_value(v) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def insights_request(params: InsightsInput) -> OutboundCall:
    return OutboundCall(body=params.model_dump(exclude_none=True))


def predictleads_request(params: PredictLeadsInput) -> OutboundCall:
    extra = tuple((str(k), stringify_query_value(v)) for k, v in (params.query or {}).items())
    return OutboundCall(path=params.path, params=extra)


def yousearch_request(params: YouSearchInput) -> OutboundCall:
    query: list[tuple[str, str]] = [("query", params.query)]
    if params.numWebResults is not None:
        query.append(("num_web_results", format_number(params.numWebResults)))
    if params.freshness:
        query.append(("freshness", params.freshness))
    if params.country:
        query.append(("country", params.country))
    if params.safesearch:
        query.append(("safesearch", params.safesearch))
    return OutboundCall(params=tuple(query))


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: type[BaseModel]
    endpoint: ProviderEndpoint
    to_request: Callable[[Any], OutboundCall]

    async def invoke(self, arguments: Mapping[str, Any] | None = None) -> dict:
        """Validate arguments, call the provider once and return the normalized result.

        Raises:
            pydantic.ValidationError: bad arguments (no request is sent).
            ConfigurationError / ProviderError / requests.RequestException: see ProviderEndpoint.call.
        """
        params = self.input_model.model_validate(dict(arguments or {}))
        call = self.to_request(params)
        return await self.endpoint.call(call.path, call.params, call.body)


def build_tools(
    credentials: Credentials,
    http_client: HttpClient | None = None,
    urls: ProviderUrls | None = None,
) -> list[ToolDefinition]:
    urls = urls or ProviderUrls()
    http = http_client or HttpClient()

    return [
        ToolDefinition(
            name="autoboundInsights",
            description=(
                "Generate Autobound sales insights for a contact and/or user, identified by email, "
                "LinkedIn URL or company URL. Optionally filter by insight subtype."
            ),
            input_model=InsightsInput,
            endpoint=ProviderEndpoint(autobound_config(urls.autobound), credentials, http),
            to_request=insights_request,
        ),
        ToolDefinition(
            name="predictLeads",
            description=(
                "Call the PredictLeads v3 company data API. `path` is the resource path "
                "(e.g. /companies/github.com); `query` adds extra query parameters."
            ),
            input_model=PredictLeadsInput,
            endpoint=ProviderEndpoint(predictleads_config(urls.predictleads), credentials, http),
            to_request=predictleads_request,
        ),
        ToolDefinition(
            name="youSearch",
            description="Search the web with the You.com search API.",
            input_model=YouSearchInput,
            endpoint=ProviderEndpoint(youcom_config(urls.youcom), credentials, http),
            to_request=yousearch_request,
        ),
    ]
