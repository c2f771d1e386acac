"""SEO head markup: meta tags, Open Graph, Twitter Card and JSON-LD."""

import html
import json
from typing import List, Optional

from src.hosting_client.auth import DEFAULT_SITE_SUFFIX
from src.page_model.models import PageDefinition

GENERATOR = "site-publish"


def _attr(value: str) -> str:
    return html.escape(value, quote=True)


def page_title(page: PageDefinition) -> str:
    return page.seo.title or page.slug


def resolve_page_url(page: PageDefinition, deployment_url: Optional[str] = None,
                     site_suffix: str = DEFAULT_SITE_SUFFIX) -> str:
    """URL the page is reachable at: deployment URL, canonical, then derived."""
    return deployment_url or page.seo.canonical or f"https://{page.slug}.{site_suffix}"


def json_for_script(data) -> str:
    """Serialize data for an inline script tag, deterministically."""
    return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False).replace("</", "<\\/")


class SeoHeadBuilder:
    """Builds the SEO portion of the document head."""

    def __init__(self, site_suffix: str = DEFAULT_SITE_SUFFIX):
        self.site_suffix = site_suffix

    def build(self, page: PageDefinition, deployment_url: Optional[str] = None) -> str:
        """Build meta tags for a page.

        Args:
            page: Page definition carrying the SEO config
            deployment_url: Public URL when already known (republish)

        Returns:
            Head markup, one tag per line
        """
        seo = page.seo
        title = page_title(page)
        url = resolve_page_url(page, deployment_url, self.site_suffix)
        tags: List[str] = []

        if seo.description:
            tags.append(f'<meta name="description" content="{_attr(seo.description)}">')
        if seo.keywords:
            tags.append(f'<meta name="keywords" content="{_attr(", ".join(seo.keywords))}">')

        canonical = seo.canonical or deployment_url
        if canonical:
            tags.append(f'<link rel="canonical" href="{_attr(canonical)}">')

        tags.extend(self._open_graph(title, seo.description, url, seo.og_image))
        tags.extend(self._twitter_card(title, seo.description, seo.og_image))

        tags.append('<meta name="robots" content="index, follow">')
        tags.append(f'<meta name="generator" content="{GENERATOR}">')

        if seo.og_image:
            tags.append(f'<link rel="icon" href="{_attr(seo.og_image)}">')
            tags.append(f'<link rel="apple-touch-icon" href="{_attr(seo.og_image)}">')

        tags.append(self._structured_data(page, title, url))
        return "\n".join(tags)

    @staticmethod
    def _open_graph(title: str, description: Optional[str], url: str,
                    image: Optional[str]) -> List[str]:
        tags = [
            f'<meta property="og:title" content="{_attr(title)}">',
            '<meta property="og:type" content="website">',
            f'<meta property="og:url" content="{_attr(url)}">',
        ]
        if description:
            tags.insert(1, f'<meta property="og:description" content="{_attr(description)}">')
        if image:
            tags.extend([
                f'<meta property="og:image" content="{_attr(image)}">',
                f'<meta property="og:image:alt" content="{_attr(title)}">',
                '<meta property="og:image:width" content="1200">',
                '<meta property="og:image:height" content="630">',
            ])
        return tags

    @staticmethod
    def _twitter_card(title: str, description: Optional[str], image: Optional[str]) -> List[str]:
        tags = [
            '<meta name="twitter:card" content="summary_large_image">',
            f'<meta name="twitter:title" content="{_attr(title)}">',
        ]
        if description:
            tags.append(f'<meta name="twitter:description" content="{_attr(description)}">')
        if image:
            tags.append(f'<meta name="twitter:image" content="{_attr(image)}">')
        return tags

    @staticmethod
    def _structured_data(page: PageDefinition, title: str, url: str) -> str:
        # Dates come from the page record, never the clock
        data = {
            "@context": "https://schema.org",
            "@type": "WebPage",
            "name": title,
            "description": page.seo.description or "",
            "url": url,
            "inLanguage": page.theme.language or "en",
        }
        if page.seo.og_image:
            data["image"] = page.seo.og_image
        if page.created_at:
            data["datePublished"] = page.created_at
        if page.updated_at:
            data["dateModified"] = page.updated_at
        return f'<script type="application/ld+json">\n{json_for_script(data)}\n</script>'
