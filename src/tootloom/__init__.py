"""tootloom: typed Mastodon REST client core.

This package provides the building blocks endpoint-specific Mastodon clients
are made of: typed, re-executable requests with sync and async execution,
cursor pagination driven by `Link` headers, codecs for Mastodon's bespoke
scalar formats, and an error taxonomy that tells transport, HTTP and decode
failures apart.
"""

__version__ = "0.1.0"

from . import (
    auth,
    client,
    codecs,
    config,
    entities,
    exceptions,
    log_config,
    pageable,
    pagination,
    request,
    retry,
    semver,
    types,
)
from .client import MastodonClient
from .codecs import Dimension, Precision, PrecisionDateTime, Scope, ScopeName
from .exceptions import (
    CodecFormatError,
    ConfigurationError,
    DecodeError,
    HttpError,
    MastodonError,
    RateLimitError,
    TransportFailure,
    TransportFailureKind,
)
from .pageable import Pageable, PageableRequest
from .pagination import Direction, Range
from .request import MastodonRequest
from .semver import SemanticVersion
from .types import Method, Parameters

__all__ = [
    "__version__",
    "auth",
    "client",
    "codecs",
    "config",
    "entities",
    "exceptions",
    "log_config",
    "pageable",
    "pagination",
    "request",
    "retry",
    "semver",
    "types",
    "CodecFormatError",
    "ConfigurationError",
    "DecodeError",
    "Dimension",
    "Direction",
    "HttpError",
    "MastodonClient",
    "MastodonError",
    "MastodonRequest",
    "Method",
    "Pageable",
    "PageableRequest",
    "Parameters",
    "Precision",
    "PrecisionDateTime",
    "Range",
    "RateLimitError",
    "Scope",
    "ScopeName",
    "SemanticVersion",
    "TransportFailure",
    "TransportFailureKind",
]
