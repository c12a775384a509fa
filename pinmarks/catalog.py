from __future__ import annotations

from typing import Dict, Tuple

from .model import Category, CuratedSite

CATEGORIES: Tuple[Category, ...] = (
    Category(
        name="Development",
        keywords=("github", "stackoverflow", "dev", "coding", "programming", "tech"),
        domains=("github.com", "stackoverflow.com", "dev.to", "medium.com"),
    ),
    Category(
        name="News",
        keywords=("news", "article", "blog", "report"),
        domains=("bbc.com", "reuters.com", "techcrunch.com", "theverge.com"),
    ),
    Category(
        name="Learning",
        keywords=("course", "tutorial", "learn", "education", "guide"),
        domains=("coursera.org", "udemy.com", "khanacademy.org", "edx.org"),
    ),
    Category(
        name="Productivity",
        keywords=("tool", "productivity", "work", "organize"),
        domains=("notion.so", "trello.com", "slack.com", "asana.com"),
    ),
    Category(
        name="Design",
        keywords=("design", "ui", "ux", "creative", "inspiration"),
        domains=("dribbble.com", "behance.net", "figma.com", "adobe.com"),
    ),
)

CURATED_SITES: Dict[str, Tuple[CuratedSite, ...]] = {
    "Development": (
        CuratedSite(
            title="MDN Web Docs - Web development resources",
            url="https://developer.mozilla.org",
            description="Comprehensive web development documentation",
            rating=9.5,
            category="Development",
        ),
        CuratedSite(
            title="Hacker News - Tech news and discussions",
            url="https://news.ycombinator.com",
            description="Quality tech news and startup discussions",
            rating=9.0,
            category="Development",
        ),
    ),
    "News": (
        CuratedSite(
            title="Reuters - Global news coverage",
            url="https://reuters.com",
            description="Reliable international news source",
            rating=9.2,
            category="News",
        ),
        CuratedSite(
            title="Associated Press News",
            url="https://apnews.com",
            description="Unbiased news reporting",
            rating=9.0,
            category="News",
        ),
    ),
    "Learning": (
        CuratedSite(
            title="Khan Academy - Free education",
            url="https://khanacademy.org",
            description="Free world-class education for anyone",
            rating=9.4,
            category="Learning",
        ),
        CuratedSite(
            title="Coursera - Online courses",
            url="https://coursera.org",
            description="University-level courses online",
            rating=8.8,
            category="Learning",
        ),
    ),
    "Productivity": (
        CuratedSite(
            title="Notion - All-in-one workspace",
            url="https://notion.so",
            description="Notes, docs, and project management",
            rating=9.1,
            category="Productivity",
        ),
        CuratedSite(
            title="Todoist - Task management",
            url="https://todoist.com",
            description="Simple and powerful task manager",
            rating=8.7,
            category="Productivity",
        ),
    ),
    "Design": (
        CuratedSite(
            title="Dribbble - Design inspiration",
            url="https://dribbble.com",
            description="Creative design showcase",
            rating=8.9,
            category="Design",
        ),
        CuratedSite(
            title="Unsplash - Free photos",
            url="https://unsplash.com",
            description="High-quality free photographs",
            rating=9.0,
            category="Design",
        ),
    ),
}


def curated_sites_for(category: str, sites: Dict[str, Tuple[CuratedSite, ...]] = CURATED_SITES) -> Tuple[CuratedSite, ...]:
    return tuple(sites.get(category, ()))
