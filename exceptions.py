class BrandProfilerError(Exception):
    """Base class for errors raised by the crawl and generation pipeline."""


class HomepageUnreachableError(BrandProfilerError):
    """The homepage could not be fetched, so there is nothing to crawl from."""

    def __init__(self, url):
        self.url = url
        super().__init__(f"Homepage unreachable: {url}")


class ProfileParseError(BrandProfilerError, ValueError):
    """The summarizer answered with something that is not a JSON object."""


class TargetNotFoundError(BrandProfilerError, LookupError):
    def __init__(self, target_id):
        self.target_id = target_id
        super().__init__(f"Target not found: {target_id}")


class MissingWebsiteError(BrandProfilerError, ValueError):
    def __init__(self, target_id):
        self.target_id = target_id
        super().__init__(f"Target {target_id} has no website URL configured")
