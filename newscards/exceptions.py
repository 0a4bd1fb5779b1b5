class NewsCardsError(Exception):
    pass


class ExternalServiceError(NewsCardsError):
    pass


class LLMServiceError(ExternalServiceError):
    pass


class FeedFetchError(ExternalServiceError):
    pass


class SocialApiError(ExternalServiceError):
    pass


class ScrapeError(ExternalServiceError):
    pass
