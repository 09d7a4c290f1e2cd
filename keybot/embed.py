"""Building Discord message embeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

EMBED_COLOR = 0x00FF00

EMBED_LIMIT_TITLE = 256
EMBED_LIMIT_DESCRIPTION = 2048
EMBED_LIMIT_FIELD_VALUE = 1024
EMBED_LIMIT_FIELD_NAME = 256
EMBED_LIMIT_FIELD = 25
EMBED_LIMIT_FOOTER = 2048
EMBED_LIMIT = 4000


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v not in ("", None, 0, False, [])}


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.inline:
            data["inline"] = True
        return data


@dataclass
class EmbedFooter:
    text: str = ""
    icon_url: str = ""
    proxy_icon_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text} | _drop_empty(
            {"icon_url": self.icon_url, "proxy_icon_url": self.proxy_icon_url}
        )


@dataclass
class EmbedImage:
    url: str = ""
    proxy_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url} | _drop_empty({"proxy_url": self.proxy_url})


@dataclass
class EmbedAuthor:
    name: str = ""
    icon_url: str = ""
    url: str = ""
    proxy_icon_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name} | _drop_empty(
            {
                "url": self.url,
                "icon_url": self.icon_url,
                "proxy_icon_url": self.proxy_icon_url,
            }
        )


@dataclass
class Embed:
    """A message embed with chainable setters."""

    title: str = ""
    description: str = ""
    url: str = ""
    color: int = 0
    fields: list[EmbedField] = field(default_factory=list)
    footer: EmbedFooter | None = None
    image: EmbedImage | None = None
    thumbnail: EmbedImage | None = None
    author: EmbedAuthor | None = None

    def set_title(self, name: str) -> Embed:
        self.title = name
        return self

    def set_description(self, description: str) -> Embed:
        self.description = description[:EMBED_LIMIT_DESCRIPTION]
        return self

    def add_field(self, name: str, value: str) -> Embed:
        self.fields.append(
            EmbedField(name=name[:EMBED_LIMIT_FIELD_VALUE], value=value[:EMBED_LIMIT_FIELD_VALUE])
        )
        return self

    def set_footer(self, *args: str) -> Embed:
        """Set the footer from text, icon URL and proxy URL, in that order."""
        if not args:
            return self
        text, icon_url, proxy_url = (*args[:3], "", "")[:3]
        self.footer = EmbedFooter(text=text, icon_url=icon_url, proxy_icon_url=proxy_url)
        return self

    def set_image(self, *args: str) -> Embed:
        """Set the image from URL and proxy URL."""
        if args:
            url, proxy_url = (*args[:2], "")[:2]
            self.image = EmbedImage(url=url, proxy_url=proxy_url)
        return self

    def set_thumbnail(self, *args: str) -> Embed:
        """Set the thumbnail from URL and proxy URL."""
        if args:
            url, proxy_url = (*args[:2], "")[:2]
            self.thumbnail = EmbedImage(url=url, proxy_url=proxy_url)
        return self

    def set_author(self, *args: str) -> Embed:
        """Set the author from name, icon URL, URL and proxy icon URL."""
        if args:
            name, icon_url, url, proxy_url = (*args[:4], "", "", "")[:4]
            self.author = EmbedAuthor(
                name=name, icon_url=icon_url, url=url, proxy_icon_url=proxy_url
            )
        return self

    def set_url(self, url: str) -> Embed:
        self.url = url
        return self

    def set_color(self, color: int) -> Embed:
        self.color = color
        return self

    def inline_all_fields(self) -> Embed:
        for f in self.fields:
            f.inline = True
        return self

    def truncate(self) -> Embed:
        """Cut every part of the embed down to Discord's limits."""
        return (
            self.truncate_description()
            .truncate_fields()
            .truncate_footer()
            .truncate_title()
        )

    def truncate_fields(self) -> Embed:
        del self.fields[EMBED_LIMIT_FIELD:]
        for f in self.fields:
            f.name = f.name[:EMBED_LIMIT_FIELD_NAME]
            f.value = f.value[:EMBED_LIMIT_FIELD_VALUE]
        return self

    def truncate_description(self) -> Embed:
        self.description = self.description[:EMBED_LIMIT_DESCRIPTION]
        return self

    def truncate_title(self) -> Embed:
        self.title = self.title[:EMBED_LIMIT_TITLE]
        return self

    def truncate_footer(self) -> Embed:
        if self.footer is not None:
            self.footer.text = self.footer.text[:EMBED_LIMIT_FOOTER]
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the embed as Discord's JSON object, omitting empty parts."""
        data = _drop_empty(
            {
                "title": self.title,
                "description": self.description,
                "url": self.url,
                "color": self.color,
                "fields": [f.to_dict() for f in self.fields],
            }
        )
        for name in ("footer", "image", "thumbnail", "author"):
            part = getattr(self, name)
            if part is not None:
                data[name] = part.to_dict()
        return data


class _EmbedSender(Protocol):
    async def send_channel_embed(self, channel_id: str, embed: Embed) -> Any: ...


async def send_embed(
    client: _EmbedSender, channel_id: str, title: str, field_title: str, field: str
) -> None:
    """Send a single-field embed, titled if a title is given, to a channel."""
    embed = Embed()
    if title:
        embed.set_title(title)
    embed.add_field(field_title, field).set_color(EMBED_COLOR)
    await client.send_channel_embed(channel_id, embed)