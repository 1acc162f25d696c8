"""
Static site assembly: one page per note, home and listing pages, one
page per tag, the link graph, plus the stylesheet and assets.
"""

import json
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

from ..adapters.fs_storage import copy_assets
from ..adapters.resolver_index import NoteIndex
from ..config import SiteConfig
from ..core.dates import generation_stamp, naturalize_date, now_compact, now_iso, og_timestamp
from ..core.model import Note, Paragraph, Text, TextMark, TocItem
from ..core.ports import ExportAdapter, StorageStrategy
from ..core.template import fill, finalize, protect, read_template, toggle_section
from ..core.utils import (
    escape_attr,
    escape_html,
    plain_text,
    tag_page_name,
    truncate,
    truncate_at_break,
)
from ..core.vault import INDEX_TAG, find_index_note
from ..graph import build_link_graph
from ..render import render_note
from ..render.toc import toc_html

logger = logging.getLogger(__name__)

CSS_PATH = "styles.css"

BACK_NAVIGATION_HTML = (
    '<a href="index.html" class="back-link">Back to home'
    '<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" class="lucide lucide-arrow-left">'
    '<path d="m12 19-7-7 7-7"></path><path d="M19 12H5"></path></svg></a>'
)

DESCRIPTION_MIN = 100
DESCRIPTION_LIMIT = 200
TAG_EXCERPT_BLOCKS = 3
TAG_TOOLTIP_TITLES = 3

_CSS_URL_RE = re.compile(r"url\(\s*(['\"]?)(.*?)\1\s*\)")


def meta_description(note: Note) -> str:
    """
    Plain text of the leading top-level paragraphs, escaped, for the
    description meta tags.

    Stops once two paragraphs are in and the text passes 100
    characters; falls back to the title.
    """
    text = ""
    count = 0
    for block in note.children:
        if not isinstance(block, Paragraph):
            continue
        if count:
            text += " "
        text += plain_text(block)
        count += 1
        if count >= 2 and len(text) > DESCRIPTION_MIN:
            break
    if not text:
        text = note.display_title
    text = escape_html(text)
    if len(text) > DESCRIPTION_LIMIT:
        text = truncate(text, DESCRIPTION_LIMIT - 3)
    return text


def tag_excerpt(note: Note) -> str:
    """Tooltip excerpt for a note listed on a tag page."""
    text = ""
    for block in note.children[:TAG_EXCERPT_BLOCKS]:
        text = _run_text(block) or next(
            (t for t in (_run_text(c) for c in block.children) if t), ""
        )
        if text:
            break
    if text:
        return escape_html(truncate_at_break(text))
    if note.tag_list:
        return escape_html("Tagged with: " + ", ".join(note.tag_list))
    return escape_html(note.title)


def _run_text(block) -> str:
    if isinstance(block, Text):
        return block.data
    if isinstance(block, TextMark):
        return block.text
    return ""


def og_image_url(title_img: str, base_url: str) -> str:
    """Absolute URL of the image inside a `background-image: url(…)` header style."""
    if "background-image" not in title_img:
        return ""
    m = _CSS_URL_RE.search(title_img)
    if not m or not m.group(2):
        return ""
    path = m.group(2)
    if re.match(r"^[a-z][a-z0-9+.-]*://", path, re.IGNORECASE):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def count_sentence(count: int, tag: str) -> str:
    if count == 1:
        return f'1 note has the tag "{tag}"'
    return f'{count} notes have the tag "{tag}"'


class SiteExporter(ExportAdapter):
    def __init__(
        self,
        index: NoteIndex,
        out: Path,
        site: SiteConfig | None = None,
        storage: StorageStrategy | None = None,
        template_dir: Path | None = None,
        graph: bool = True,
        now: datetime | None = None,
    ):
        self.index = index
        self.out = out
        self.site = site or SiteConfig()
        self.storage = storage
        self.template_dir = template_dir
        self.graph = graph
        self.now = now
        self._template = ""

    def export_all(self, out_dir: str | None = None) -> int:
        """Write the whole site; returns the number of pages written."""
        out = self.out if out_dir is None else Path(out_dir)
        if out.exists():
            logger.debug("removing existing output directory %s", out)
            shutil.rmtree(out)
        out.mkdir(parents=True)

        if self.storage is not None:
            copy_assets(self.storage, out / "assets")
        (out / CSS_PATH).write_text(self._read("styles.css"), encoding="utf-8")

        pages = 0
        home_id = find_index_note(self.index)
        if home_id is not None:
            logger.debug("generating custom index page from %s", home_id)
            self._write(out / "index.html", self.home_page(self.index[home_id]))
            self._write(out / "all.html", self.listing_page(all_notes=True))
            pages += 2
        else:
            self._write(out / "index.html", self.listing_page(all_notes=False))
            pages += 1

        for nid in sorted(self.index):
            logger.debug("generating HTML for note %s", nid)
            self._write(out / f"{nid}.html", self.note_page(self.index[nid]))
            pages += 1

        for tag in self.index.all_tags():
            logger.debug("generating page for tag %s", tag)
            self._write(out / tag_page_name(tag), self.tag_page(tag))
            pages += 1

        if self.graph:
            graph = build_link_graph(self.index)
            (out / "graph.json").write_text(
                json.dumps(graph.to_dict(), indent=2), encoding="utf-8"
            )
            self._write(out / "graph.html", self.graph_page())
            pages += 1

        return pages

    # -- pages ---------------------------------------------------------------

    def note_page(self, note: Note) -> str:
        return self._note_html(note, home=False)

    def home_page(self, note: Note) -> str:
        return self._note_html(note, home=True)

    def listing_page(self, all_notes: bool) -> str:
        """The note listing: `all.html` beside a custom home, else the home itself."""
        stamp = now_compact(self.now)
        values = self._common_values()
        values.update(
            title="All Notes" if all_notes else "Notes Index",
            meta_description="Collection of all notes",
            og_url=escape_attr(self.site.base_url),
            og_published_time=now_iso(self.now),
            publish_date=naturalize_date(stamp),
            last_updated_date=f"Created on {naturalize_date(stamp)}",
            category="Notes",
            back_navigation=BACK_NAVIGATION_HTML if all_notes else "",
            table_of_contents=toc_html(
                [
                    TocItem("section-all-notes", "All Notes", 2),
                    TocItem("section-tags", "Tags", 2),
                ]
            ),
            note_meta=(
                f'<span class="meta-tag date-tag">Created on {naturalize_date(stamp)}</span>'
                if all_notes
                else ""
            ),
        )
        items = "".join(
            f'<li><a href="{escape_attr(n.id)}.html">{escape_html(n.title)}</a></li>\n'
            for n in self.index.titled_notes()
        )
        content = (
            f'<h2 id="section-all-notes">All Notes</h2>\n<ul>\n{items}</ul>\n'
            f'<h2 id="section-tags">Tags</h2>\n<div class="tags-container">\n'
            f"{self._tag_cloud()}</div>"
        )
        return self._page(values, content)

    def tag_page(self, tag: str) -> str:
        notes = self.index.tagged(tag)
        sentence = count_sentence(len(notes), tag)
        stamp = now_compact(self.now)
        values = self._common_values()
        values.update(
            title=escape_html(f"Tag: {tag}"),
            meta_description=escape_html(sentence),
            blog_description=escape_html(sentence),
            og_url=escape_attr(f"{self.site.base_url.rstrip('/')}/{tag_page_name(tag)}"),
            og_published_time=now_iso(self.now),
            publish_date=naturalize_date(stamp),
            note_meta=f'<span class="meta-tag date-tag">Created on {naturalize_date(stamp)}</span>',
            category="Tags",
            back_navigation=BACK_NAVIGATION_HTML,
            table_of_contents=toc_html(
                [
                    TocItem("section-tagged-notes", sentence, 2),
                    TocItem("section-all-tags", "All Tags", 2),
                ]
            ),
        )
        items = []
        for n in notes:
            title = escape_html(n.display_title)
            items.append(
                f'<li><span class="tooltip"><a href="{escape_attr(n.id)}.html">{title}</a>'
                f'<span class="right bottom"><span class="tooltip-title">{title}</span>'
                f'<span class="tooltip-excerpt">{tag_excerpt(n)}</span><i></i></span></span></li>\n'
            )
        content = (
            f'<h2 id="section-tagged-notes">{escape_html(sentence)}</h2>\n'
            f"<ul>\n{''.join(items)}</ul>\n"
            f'<h2 id="section-all-tags">All Tags</h2>\n<div class="tags-container">\n'
            f"{self._tag_cloud(active=tag)}</div>"
        )
        return self._page(values, content)

    def graph_page(self) -> str:
        graph = build_link_graph(self.index)
        data = json.dumps(graph.to_dict())
        # "{{" and "</" only occur inside JSON strings here
        data = data.replace("{{", "{\\u007b").replace("</", "<\\/")
        html = fill(
            self._read("graph.html"),
            {
                "site_name": escape_html(self.site.name),
                "css_path": CSS_PATH,
                "node_count": str(len(graph.nodes)),
                "edge_count": str(len(graph.edges)),
                "graph_json": data,
            },
        )
        return finalize(html)

    # -- helpers -------------------------------------------------------------

    def _note_html(self, note: Note, home: bool) -> str:
        created, updated = note.created, note.updated
        was_updated = bool(updated) and updated != created

        title = note.title or ("Notes Index" if home else note.id)
        base = self.site.base_url.rstrip("/")
        values = self._common_values()
        values.update(
            title=escape_html(title),
            meta_description=meta_description(note),
            back_navigation="" if home else BACK_NAVIGATION_HTML,
            og_url=escape_attr(self.site.base_url if home else f"{base}/{note.id}.html"),
            og_image=escape_attr(og_image_url(note.title_img, self.site.base_url)),
            og_published_time=og_timestamp(created) or now_iso(self.now),
            og_modified_time=og_timestamp(updated) if was_updated else "",
            header_image=escape_attr(note.title_img),
            publish_date=naturalize_date(created),
            last_updated_date=(
                f"Created on {naturalize_date(created)}, updated on {naturalize_date(updated)}"
                if was_updated
                else f"Created on {naturalize_date(created)}"
            ),
            category="Notes" if home else escape_html(note.note_type),
        )

        content, toc = render_note(note, self.index)
        if home:
            content += '\n<div class="all-notes-link"><a href="all.html">View All Notes</a></div>'
        values["table_of_contents"] = toc

        tags = sorted(t for t in note.tag_list if t != INDEX_TAG)
        meta = []
        if created:
            meta.append(
                f'<span class="meta-tag date-tag">Created: {naturalize_date(created)}</span>'
            )
        if was_updated:
            meta.append(
                f'<span class="meta-tag date-tag">Updated: {naturalize_date(updated)}</span>'
            )
        meta.extend(
            f'<a href="{escape_attr(tag_page_name(t))}" class="meta-tag">{escape_html(t)}</a>'
            for t in tags
        )
        values["note_meta"] = "".join(meta)
        values["og_tags"] = "".join(
            f'<meta property="article:tag" content="{escape_attr(t)}">' for t in tags
        )

        backlinks = self.index.backlinks(note.id)
        values["backlinks"] = "".join(
            f'<li><a href="{escape_attr(b.id)}.html">{escape_html(b.display_title)}</a></li>\n'
            for b in backlinks
        )

        sections = {
            "header_image": bool(note.title_img),
            "og_modified_time": was_updated,
            "og_tags": bool(tags),
            "backlinks": bool(backlinks),
        }
        return self._page(values, content, sections)

    def _common_values(self) -> dict[str, str]:
        return {
            "css_path": CSS_PATH,
            "site_name": escape_html(self.site.name),
            "author_name": escape_html(self.site.author),
            "blog_description": escape_html(self.site.description),
            "reading_time": "",
            "next_article_url": "#",
            "next_article_title": "",
            "generation_date": generation_stamp(self.now),
        }

    def _page(
        self, values: dict[str, str], content: str, sections: dict[str, bool] | None = None
    ) -> str:
        if not self._template:
            self._template = self._read("page.html")
        html = self._template
        for name in ("header_image", "og_modified_time", "og_tags", "backlinks"):
            html = toggle_section(html, name, (sections or {}).get(name, False))
        # content goes in last; no filled value may introduce a placeholder
        html = fill(html, {k: protect(v) for k, v in values.items()})
        html = fill(html, {"content": protect(content)})
        return finalize(html)

    def _tag_cloud(self, active: str | None = None) -> str:
        out = []
        for tag in self.index.all_tags():
            notes = self.index.tagged(tag)
            tooltip = count_sentence(len(notes), tag)
            if notes:
                titles = ", ".join(f'"{n.title}"' for n in notes[:TAG_TOOLTIP_TITLES])
                tooltip += f": {titles}"
                if len(notes) > TAG_TOOLTIP_TITLES:
                    tooltip += ", ..."
            cls = "tag active" if tag == active else "tag"
            out.append(
                f'<span class="tooltip"><a href="{escape_attr(tag_page_name(tag))}" '
                f'class="{cls}">{escape_html(tag)}</a><span class="right bottom">'
                f'<span class="tooltip-excerpt">{escape_html(tooltip)}</span>'
                f"<i></i></span></span>\n"
            )
        return "".join(out)

    def _read(self, name: str) -> str:
        return read_template(name, self.template_dir)

    def _write(self, path: Path, html: str) -> None:
        path.write_text(html, encoding="utf-8")
