import pytest

from keybot.embed import (
    EMBED_COLOR,
    EMBED_LIMIT_DESCRIPTION,
    EMBED_LIMIT_FIELD,
    EMBED_LIMIT_FIELD_NAME,
    EMBED_LIMIT_FIELD_VALUE,
    EMBED_LIMIT_FOOTER,
    EMBED_LIMIT_TITLE,
    Embed,
    EmbedAuthor,
    EmbedFooter,
    EmbedImage,
    send_embed,
)


def test_chaining_returns_same_embed():
    embed = Embed()
    assert embed.set_title("t").set_color(EMBED_COLOR).add_field("a", "b") is embed
    assert embed.title == "t"
    assert embed.color == EMBED_COLOR


def test_set_description_truncates():
    embed = Embed().set_description("x" * (EMBED_LIMIT_DESCRIPTION + 10))
    assert len(embed.description) == EMBED_LIMIT_DESCRIPTION


def test_add_field_truncates_value_and_name_to_field_value_limit():
    embed = Embed().add_field("n" * 2000, "v" * 2000)
    assert len(embed.fields[0].value) == EMBED_LIMIT_FIELD_VALUE
    assert len(embed.fields[0].name) == EMBED_LIMIT_FIELD_VALUE


def test_truncate_fields():
    embed = Embed()
    for _ in range(EMBED_LIMIT_FIELD + 5):
        embed.add_field("n" * 600, "v")
    embed.truncate_fields()
    assert len(embed.fields) == EMBED_LIMIT_FIELD
    assert all(len(f.name) == EMBED_LIMIT_FIELD_NAME for f in embed.fields)


def test_truncate_all():
    embed = (
        Embed()
        .set_title("t" * (EMBED_LIMIT_TITLE + 1))
        .set_footer("f" * (EMBED_LIMIT_FOOTER + 1))
    )
    embed.description = "d" * (EMBED_LIMIT_DESCRIPTION + 1)
    embed.truncate()
    assert len(embed.title) == EMBED_LIMIT_TITLE
    assert len(embed.footer.text) == EMBED_LIMIT_FOOTER
    assert len(embed.description) == EMBED_LIMIT_DESCRIPTION


def test_truncate_footer_without_footer():
    assert Embed().truncate_footer().footer is None


@pytest.mark.parametrize(
    "args, expected",
    [
        (("text",), EmbedFooter("text", "", "")),
        (("text", "icon"), EmbedFooter("text", "icon", "")),
        (("text", "icon", "proxy", "extra"), EmbedFooter("text", "icon", "proxy")),
    ],
)
def test_set_footer_args(args, expected):
    assert Embed().set_footer(*args).footer == expected


def test_setters_without_args_leave_embed_unchanged():
    embed = Embed().set_footer().set_image().set_thumbnail().set_author()
    assert embed == Embed()


def test_image_thumbnail_author():
    embed = (
        Embed()
        .set_image("img")
        .set_thumbnail("th", "proxy")
        .set_author("name", "icon", "link")
    )
    assert embed.image == EmbedImage("img", "")
    assert embed.thumbnail == EmbedImage("th", "proxy")
    assert embed.author == EmbedAuthor("name", "icon", "link", "")


def test_inline_all_fields():
    embed = Embed().add_field("a", "1").add_field("b", "2").inline_all_fields()
    assert all(f.inline for f in embed.fields)


def test_to_dict_omits_empty_parts():
    embed = Embed().set_title("T").add_field("n", "v").set_color(EMBED_COLOR)
    assert embed.to_dict() == {
        "title": "T",
        "color": EMBED_COLOR,
        "fields": [{"name": "n", "value": "v"}],
    }
    assert Embed().to_dict() == {}


def test_to_dict_nested_parts():
    data = Embed().set_url("u").set_footer("f").set_image("i").to_dict()
    assert data["url"] == "u"
    assert data["footer"] == {"text": "f"}
    assert data["image"] == {"url": "i"}


class _FakeClient:
    def __init__(self):
        self.sent = []

    async def send_channel_embed(self, channel_id, embed):
        self.sent.append((channel_id, embed))


@pytest.mark.asyncio
async def test_send_embed_with_title():
    client = _FakeClient()
    await send_embed(client, "chan", "Title", "Here is your key", "body")
    channel_id, embed = client.sent[0]
    assert channel_id == "chan"
    assert embed.title == "Title"
    assert embed.color == EMBED_COLOR
    assert embed.fields[0].name == "Here is your key"
    assert embed.fields[0].value == "body"


@pytest.mark.asyncio
async def test_send_embed_without_title():
    client = _FakeClient()
    await send_embed(client, "chan", "", "Redeem Link", "body")
    _, embed = client.sent[0]
    assert embed.title == ""
    assert "title" not in embed.to_dict()
    assert len(embed.fields) == 1