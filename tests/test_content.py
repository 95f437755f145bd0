import logging

import pytest
from bs4 import BeautifulSoup

from article_reader.content import (
    NO_CONTENT,
    extract_structured_content,
    fallback_paragraphs,
    segment_blocks,
    strip_boilerplate,
)
from article_reader.models import BlockType


def _types(blocks):
    return [block.type for block in blocks]


def test_strip_boilerplate_removes_chrome_and_comments():
    html = """
    <div>
      <script>var tracking = 1;</script>
      <style>p { color: red; }</style>
      <nav>Top menu</nav>
      <header>Site header</header>
      <p>Keep this paragraph.</p>
      <!-- editorial note -->
      <form><input name="q"></form>
      <iframe src="https://video.example.com/embed"></iframe>
      <aside>Trending now</aside>
      <div class="Social-Links">Tweet this</div>
      <div class="newsletter-box"><p>Sign up today</p></div>
      <footer>Site footer</footer>
    </div>
    """
    cleaned = strip_boilerplate(html)

    assert "Keep this paragraph." in cleaned
    for removed in (
        "tracking",
        "color: red",
        "Top menu",
        "Site header",
        "editorial note",
        "<input",
        "video.example.com",
        "Trending now",
        "Tweet this",
        "Sign up today",
        "Site footer",
    ):
        assert removed not in cleaned


def test_strip_boilerplate_is_noop_without_matches():
    html = '<div class="story"><p>Nothing to remove here.</p></div>'
    assert strip_boilerplate(html) == html


def test_blocks_preserve_document_order(base_url, paragraphs):
    p1, p2, p3 = paragraphs[:3]
    fragment = f"""
    <div>
      <h2>Section heading one</h2>
      <p>{p1}</p>
      <img src="/img/one.jpg" alt="First image">
      <h3>Section heading two</h3>
      <p>{p2}</p>
      <img src="two.jpg" width="400">
      <p>{p3}</p>
    </div>
    """
    blocks, images = segment_blocks(fragment, base_url)

    assert _types(blocks) == [
        BlockType.HEADING,
        BlockType.PARAGRAPH,
        BlockType.IMAGE,
        BlockType.HEADING,
        BlockType.PARAGRAPH,
        BlockType.IMAGE,
        BlockType.PARAGRAPH,
    ]
    assert [block.text for block in blocks if block.type is BlockType.PARAGRAPH] == [p1, p2, p3]
    assert [block.level for block in blocks if block.type is BlockType.HEADING] == [2, 3]
    assert images == [
        "https://news.example.com/img/one.jpg",
        "https://news.example.com/two.jpg",
    ]
    assert blocks[2].text == "First image"
    assert blocks[2].image_url == images[0]
    assert [block.position for block in blocks] == sorted(block.position for block in blocks)


def test_figure_caption_follows_its_image(base_url, paragraphs):
    fragment = f"""
    <p>{paragraphs[0]}</p>
    <figure>
      <img src="a.jpg">
      <figcaption>A caption for the photo</figcaption>
    </figure>
    <p>{paragraphs[1]}</p>
    """
    blocks, images = segment_blocks(fragment, base_url)

    assert _types(blocks) == [
        BlockType.PARAGRAPH,
        BlockType.IMAGE,
        BlockType.CAPTION,
        BlockType.PARAGRAPH,
    ]
    image, caption = blocks[1], blocks[2]
    assert image.image_url == "https://news.example.com/a.jpg"
    assert image.text == ""
    assert caption.text == "A caption for the photo"
    assert caption.position == image.position + 0.1
    assert images == ["https://news.example.com/a.jpg"]


def test_figure_without_usable_image_is_skipped(base_url):
    fragment = """
    <figure><figcaption>Caption without any image at all</figcaption></figure>
    <figure><img src="data:image/png;base64,AAA"><figcaption>Inline data caption</figcaption></figure>
    <figure><img src="b.jpg"><figcaption>Short</figcaption></figure>
    """
    blocks, images = segment_blocks(fragment, base_url)

    assert _types(blocks) == [BlockType.IMAGE]
    assert images == ["https://news.example.com/b.jpg"]


def test_small_images_are_filtered(base_url):
    blocks, images = segment_blocks('<img src="x.png" width="50" height="50">', base_url)
    assert blocks == [] and images == []

    blocks, images = segment_blocks('<img src="z.png" width="300" height="80">', base_url)
    assert blocks == [] and images == []

    blocks, images = segment_blocks('<img src="y.png" width="400">', base_url)
    assert _types(blocks) == [BlockType.IMAGE]
    assert images == ["https://news.example.com/y.png"]

    blocks, _ = segment_blocks('<img src="big.png" width="auto">', base_url)
    assert _types(blocks) == [BlockType.IMAGE]

    blocks, _ = segment_blocks('<img src="wide.png" width="100%">', base_url)
    assert _types(blocks) == [BlockType.IMAGE]

    blocks, _ = segment_blocks('<img src="tiny.png" width="50px">', base_url)
    assert blocks == []


def test_text_thresholds(base_url):
    fragment = f"""
    <h2>Intro</h2>
    <h2>Intros!</h2>
    <p>{"x" * 30}</p>
    <p>{"y" * 31}</p>
    <blockquote>{"q" * 20}</blockquote>
    <blockquote>{"r" * 21}</blockquote>
    <ul><li>{"l" * 15}</li><li>{"m" * 16}</li></ul>
    """
    blocks, _ = segment_blocks(fragment, base_url)

    assert [(block.type, block.text) for block in blocks] == [
        (BlockType.HEADING, "Intros!"),
        (BlockType.PARAGRAPH, "y" * 31),
        (BlockType.QUOTE, "r" * 21),
        (BlockType.LIST_ITEM, "m" * 16),
    ]


def test_caption_keyword_paragraphs(base_url, paragraphs):
    fragment = f"""
    <p>Photo: Jane Doe for the Example News Agency</p>
    <p>AP: the wire service distributed this picture</p>
    <p>{paragraphs[0]}</p>
    """
    blocks, _ = segment_blocks(fragment, base_url)

    assert _types(blocks) == [BlockType.CAPTION, BlockType.CAPTION, BlockType.PARAGRAPH]


def test_nested_text_is_not_repeated(base_url, paragraphs):
    fragment = f"""
    <blockquote><p>We will keep the buses running no matter what it takes.</p></blockquote>
    <p>{paragraphs[0]} <img src="inline.jpg"></p>
    """
    blocks, images = segment_blocks(fragment, base_url)

    assert _types(blocks) == [BlockType.QUOTE, BlockType.PARAGRAPH, BlockType.IMAGE]
    assert blocks[0].text == "We will keep the buses running no matter what it takes."
    assert images == ["https://news.example.com/inline.jpg"]


def test_entities_are_decoded(base_url):
    blocks, _ = segment_blocks(
        "<p>Fish &amp; chips&nbsp;are served here every single day of the week.</p>",
        base_url,
    )
    assert blocks[0].text == "Fish & chips are served here every single day of the week."


def test_lower_priority_container_wins_when_article_is_thin(base_url, paragraphs):
    html = f"""
    <body>
      <article><p>{paragraphs[0]}</p><p>{paragraphs[1]}</p></article>
      <div class="article-content">
        <h2>Opening section</h2>
        <p>{paragraphs[0]}</p>
        <p>{paragraphs[1]}</p>
        <p>{paragraphs[2]}</p>
        <p>{paragraphs[3]}</p>
      </div>
    </body>
    """
    soup = BeautifulSoup(html, "html.parser")
    structured = extract_structured_content(soup, base_url)

    assert structured.extracted
    assert not structured.from_fallback
    assert len(structured.blocks) == 5
    assert structured.text.startswith("## Opening section")
    assert structured.text.endswith(paragraphs[3])


def test_paragraph_fallback(base_url, paragraphs):
    html = f"""
    <body>
      <div>
        <p>{paragraphs[0]}</p>
        <p>Advertisement</p>
        <p>123-456-7890</p>
        <p>Photo: Jane Doe for the Example News Agency</p>
        <p>{paragraphs[1]}</p>
        <p>Too short to count as a paragraph.</p>
        <p>{paragraphs[2]}</p>
      </div>
    </body>
    """
    soup = BeautifulSoup(html, "html.parser")
    structured = extract_structured_content(soup, base_url)

    assert structured.from_fallback
    assert structured.images == []
    assert structured.text == "\n\n".join(
        [
            paragraphs[0],
            "*Photo: Jane Doe for the Example News Agency*",
            paragraphs[1],
            paragraphs[2],
        ]
    )


def test_fallback_rejects_boilerplate_phrases():
    soup = BeautifulSoup(
        "<p>123-456-7890</p><p>Advertisement</p><p>1 2 3 4 5 6 7 8 9 10 11 12 13 14 15 16 17 18 19 20</p>",
        "html.parser",
    )
    assert fallback_paragraphs(soup) == []


def test_fallback_keeps_at_most_fifteen_paragraphs(base_url):
    items = [
        f"Paragraph number {i} carries enough words to pass every fallback check."
        for i in range(20)
    ]
    soup = BeautifulSoup("".join(f"<p>{item}</p>" for item in items), "html.parser")
    structured = extract_structured_content(soup, base_url)

    assert structured.text.split("\n\n") == items[:15]


def test_nothing_extracted(base_url):
    soup = BeautifulSoup("<body><p>Hello there.</p></body>", "html.parser")
    structured = extract_structured_content(soup, base_url)

    assert not structured.extracted
    assert structured.text == NO_CONTENT


def test_figure_inside_paragraph_is_reported_once(base_url, paragraphs):
    fragment = f"""
    <p>{paragraphs[0]}
      <figure><img src="f.jpg"><figcaption>A caption for the figure</figcaption></figure>
    </p>
    """
    blocks, images = segment_blocks(fragment, base_url)

    assert _types(blocks) == [BlockType.PARAGRAPH, BlockType.IMAGE, BlockType.CAPTION]
    assert images == ["https://news.example.com/f.jpg"]
    assert blocks[2].position == blocks[1].position + 0.1


def test_deeply_nested_markup(base_url, paragraphs):
    fragment = "<div>" + "<span>" * 1200 + "".join(f"<p>{p}</p>" for p in paragraphs)
    blocks, _ = segment_blocks(fragment, base_url)

    assert [block.text for block in blocks] == paragraphs


def _container_page(container, paragraphs):
    open_tag, close_tag = container
    body = "".join(f"<p>{p}</p>" for p in paragraphs[:3])
    return f"""
    <body>
      <div><p>Unrelated text sitting outside of every candidate container on the page.</p></div>
      {open_tag}<h2>Opening section</h2>{body}{close_tag}
    </body>
    """


@pytest.mark.parametrize(
    "container, tier",
    [
        (("<article>", "</article>"), 1),
        (("<main>", "</main>"), 2),
        (('<div class="entry-content">', "</div>"), 3),
        (('<div class="page-content">', "</div>"), 4),
        (('<section class="story-wrapper">', "</section>"), 5),
        (('<div id="post-42">', "</div>"), 6),
        # every class in this tier also contains one of the broad words
        (('<div class="story-text">', "</div>"), 4),
        (('<div data-module="ArticleBody">', "</div>"), 8),
    ],
)
def test_container_tiers(base_url, paragraphs, caplog, container, tier):
    soup = BeautifulSoup(_container_page(container, paragraphs), "html.parser")
    with caplog.at_level(logging.DEBUG, logger="article_reader"):
        structured = extract_structured_content(soup, base_url)

    assert not structured.from_fallback
    assert len(structured.blocks) == 4
    assert structured.text.startswith("## Opening section")
    assert "Unrelated text" not in structured.text
    assert f"from tier {tier} " in caplog.text


def test_candidates_of_one_tier_are_tried_in_order(base_url, paragraphs):
    short = "".join(f"<p>Short paragraph number {i} is here.</p>" for i in range(3))
    html = f"""
    <body>
      <article>{short}</article>
      <article><p>{paragraphs[0]}</p></article>
      <article><h2>Opening section</h2><p>{paragraphs[1]}</p><p>{paragraphs[2]}</p></article>
    </body>
    """
    structured = extract_structured_content(BeautifulSoup(html, "html.parser"), base_url)

    assert not structured.from_fallback
    assert [block.type for block in structured.blocks] == [
        BlockType.HEADING,
        BlockType.PARAGRAPH,
        BlockType.PARAGRAPH,
    ]
    assert structured.text.endswith(paragraphs[2])
