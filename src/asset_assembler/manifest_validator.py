"""Sanity checks on an assembled file set before it is uploaded."""

import logging
from typing import List

from bs4 import BeautifulSoup

from src.page_model.errors import ValidationError

from .manifest import FileManifest

logger = logging.getLogger(__name__)

REQUIRED_FILES = ("index.html", "styles.css", "app.js")


class ManifestValidator:
    """Validates deployment files."""

    parser = "html.parser"

    @classmethod
    def check(cls, manifest: FileManifest) -> List[str]:
        """Return a list of problems; empty when the file set is deployable."""
        problems: List[str] = []

        for path in REQUIRED_FILES:
            entry = manifest.get(path)
            if entry is None:
                problems.append(f"Missing required file: {path}")
            elif not entry.content.strip():
                problems.append(f"Empty file: {path}")

        index_html = manifest.text("index.html")
        if index_html.strip():
            problems.extend(cls._check_document(index_html))
        return problems

    @classmethod
    def _check_document(cls, text: str) -> List[str]:
        problems: List[str] = []
        if not text.lstrip().lower().startswith("<!doctype html>"):
            problems.append("index.html: missing <!DOCTYPE html>")

        soup = BeautifulSoup(text, cls.parser)
        for tag in ("html", "head", "body"):
            if soup.find(tag) is None:
                problems.append(f"index.html: missing <{tag}> element")

        stylesheets = [link.get("href") for link in soup.find_all("link", rel="stylesheet")]
        if "styles.css" not in stylesheets:
            problems.append("index.html: styles.css is not linked")

        scripts = [script.get("src") for script in soup.find_all("script") if script.get("src")]
        if "app.js" not in scripts:
            problems.append("index.html: app.js is not loaded")
        return problems

    @classmethod
    def ensure_valid(cls, manifest: FileManifest) -> None:
        """Raise ValidationError listing every problem found."""
        problems = cls.check(manifest)
        if problems:
            for problem in problems:
                logger.error(problem)
            raise ValidationError("; ".join(problems), field="files")
