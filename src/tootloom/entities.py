# tootloom/entities.py
"""Pydantic models for the Mastodon entities used by this library.

Only a subset of each entity's fields is modelled; unknown fields are kept
(`extra="allow"`) so that newer server versions do not break decoding.
Fields with bespoke wire formats bind their codec explicitly through the
`Annotated` aliases from `tootloom.codecs`.
"""

from pydantic import BaseModel, ConfigDict, Field

from .codecs import DimensionField, PrecisionDateTimeField, ScopeField


class MastodonEntity(BaseModel):
    """Base model for all Mastodon entities."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Error(MastodonEntity):
    """The body Mastodon sends alongside most 4xx/5xx responses.

    Attributes:
        error: Human-readable error message.
        error_description: Longer description, mostly sent by OAuth endpoints.
    """

    error: str
    error_description: str | None = None


class Application(MastodonEntity):
    """A registered OAuth application."""

    name: str
    website: str | None = None
    scopes: ScopeField | None = None
    redirect_uri: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    vapid_key: str | None = None


class MetaInfo(MastodonEntity):
    """Size information for one rendition of a media attachment.

    `size` is the "WIDTHxHEIGHT" string Mastodon sends, decoded into a
    `Dimension`.
    """

    width: int | None = None
    height: int | None = None
    size: DimensionField | None = None
    aspect: float | None = None
    duration: float | None = None
    bitrate: int | None = None


class Focus(MastodonEntity):
    x: float
    y: float


class Meta(MastodonEntity):
    original: MetaInfo | None = None
    small: MetaInfo | None = None
    focus: Focus | None = None


class MediaAttachment(MastodonEntity):
    """A file attached to a status."""

    id: str
    type: str
    url: str | None = None
    preview_url: str | None = None
    remote_url: str | None = None
    description: str | None = None
    blurhash: str | None = None
    meta: Meta | None = None


class Account(MastodonEntity):
    """A user account, local or remote.

    Attributes:
        created_at: When the account was created. Some servers send only the
            date, which decodes with `Precision.START_OF_DAY`.
        last_status_at: Date of the account's last status, if any.
    """

    id: str
    username: str
    acct: str
    display_name: str = ""
    locked: bool = False
    bot: bool = False
    note: str = ""
    url: str | None = None
    avatar: str | None = None
    header: str | None = None
    followers_count: int = 0
    following_count: int = 0
    statuses_count: int = 0
    created_at: PrecisionDateTimeField = Field(default=None, validate_default=True)
    last_status_at: PrecisionDateTimeField = Field(
        default=None, validate_default=True
    )


class Status(MastodonEntity):
    """A post published by an account."""

    id: str
    uri: str | None = None
    url: str | None = None
    created_at: PrecisionDateTimeField = Field(default=None, validate_default=True)
    account: Account | None = None
    content: str = ""
    visibility: str | None = None
    sensitive: bool = False
    spoiler_text: str = ""
    in_reply_to_id: str | None = None
    reblogs_count: int = 0
    favourites_count: int = 0
    replies_count: int = 0
    language: str | None = None
    media_attachments: list[MediaAttachment] = Field(default_factory=list)
    application: Application | None = None
    reblog: "Status | None" = None


class Thumbnail(MastodonEntity):
    url: str
    versions: dict[str, str] = Field(default_factory=dict)


class MediaAttachmentsConfiguration(MastodonEntity):
    supported_mime_types: list[str] = Field(default_factory=list)
    image_size_limit: int | None = None
    image_matrix_limit: int | None = None
    video_size_limit: int | None = None
    video_frame_rate_limit: int | None = None
    video_matrix_limit: int | None = None


class InstanceConfiguration(MastodonEntity):
    media_attachments: MediaAttachmentsConfiguration | None = None


class Instance(MastodonEntity):
    """Information about the server (`GET /api/v2/instance`)."""

    domain: str
    title: str = ""
    version: str = ""
    source_url: str | None = None
    description: str = ""
    thumbnail: Thumbnail | None = None
    languages: list[str] = Field(default_factory=list)
    configuration: InstanceConfiguration | None = None


class InstanceVersion(MastodonEntity):
    """The `version` field shared by the v1 and v2 instance endpoints."""

    version: str


Status.model_rebuild()
