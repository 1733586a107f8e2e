import re
from typing import Optional, Sequence
from urllib.parse import urlparse

from schema import PageType
from settings import ClassifierRules


class PageClassifier:
    """
    Map a page to one PageType.

    Path rules run first and win outright; the path, title and headings are
    only scanned for topic keywords when the path says nothing.
    """

    def __init__(self, rules: Optional[ClassifierRules] = None):
        self.rules = rules or ClassifierRules()
        self._practice_topics = re.compile(self.rules.practice_topics)
        self._blog_index = re.compile(self.rules.blog_index)

    @staticmethod
    def _match(text, rules) -> Optional[PageType]:
        for markers, page_type in rules:
            if any(marker in text for marker in markers):
                return PageType(page_type)
        return None

    def classify_path(self, path) -> Optional[PageType]:
        if path in ('', '/'):
            return PageType.HOMEPAGE

        page_type = self._match(path, self.rules.early_path_rules)
        if page_type:
            return page_type
        if self._practice_topics.search(path):
            return PageType.PRACTICE_AREA

        page_type = self._match(path, self.rules.path_rules)
        if page_type:
            return page_type

        if any(marker in path for marker in self.rules.blog_markers):
            if self._blog_index.match(path):
                return PageType.BLOG
            return PageType.BLOG_POST

        return self._match(path, self.rules.late_path_rules)

    def classify(self, url, title='', headings: Sequence[str] = ()) -> PageType:
        path = urlparse(url).path.lower()
        page_type = self.classify_path(path)
        if page_type:
            return page_type

        all_text = f"{path} {(title or '').lower()} {' '.join(headings).lower()}"
        return self._match(all_text, self.rules.content_rules) or PageType.OTHER
