from astronews.core.models import AstroGlyph
from astronews.formatters.markdown import MarkdownFormatter


def test_format_glyphs():
    formatter = MarkdownFormatter()
    glyphs = [AstroGlyph("mercury", "blue", "Rx"), AstroGlyph("venus", "gold"), AstroGlyph("chiron", "grey")]

    assert formatter.format_glyphs(glyphs) == "☿Rx ♀ Chiron"


async def test_article_listing(seeded):
    formatter = MarkdownFormatter(summary_word_limit=3)
    articles = await seeded.get_articles("celebrity")

    text = formatter.format_article_list(articles, heading="Celebrity")

    assert text.startswith("## Celebrity")
    assert "### Taylor Swift Announces Surprise Album During Mercury Retrograde" in text
    assert "**People:** Taylor Swift" in text
    assert "The pop superstar..." in text
    assert "#TaylorSwift #mercuryretrograde #newmusic" in text


def test_empty_listing():
    assert "*No articles found.*" in MarkdownFormatter().format_article_list([])


async def test_full_article(seeded):
    text = MarkdownFormatter().format_article(await seeded.get_article_by_id(2))

    assert text.startswith("# Elon Musk Launches New Venture")
    assert "## Astro Analysis" in text
    assert "♃! ♄" in text
    assert "**Elon Musk** [tech] (☉ Cancer, ☽ Virgo, AC Leo)" in text


async def test_actor_profile(seeded):
    actor = await seeded.get_actor_by_slug("taylor-swift")
    beyonce = await seeded.get_actor_by_slug("beyonce")
    articles = await seeded.get_articles_by_actor(actor.id)

    text = MarkdownFormatter().format_actor_profile(actor, articles, [(beyonce, 2)])

    assert text.startswith("# Taylor Swift")
    assert "- Beyoncé: 2 shared articles" in text
    assert "## Articles" in text
