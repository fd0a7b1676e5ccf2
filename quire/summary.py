"""Page summaries."""

import re

SUMMARY_VARIABLE = 'summary'


def generate_excerpt(content: str, words: int = 30) -> str:
    """Generate an excerpt from content."""
    plain_text = re.sub(r'<[^>]+>', '', content or '')
    parts = plain_text.split()
    if len(parts) > words:
        return ' '.join(parts[:words]) + '...'
    return ' '.join(parts)


def update_summary(page, words: int = 30):
    """Set ``page.summary``, preferring a summary given in the front matter."""
    explicit = page.get(SUMMARY_VARIABLE)
    if isinstance(explicit, str) and explicit.strip():
        page.summary = explicit.strip()
    else:
        page.summary = generate_excerpt(page.content, words)
    return page.summary
