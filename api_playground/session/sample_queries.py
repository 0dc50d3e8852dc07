"""Ready-made query templates for well-known public APIs."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple


@dataclass(frozen=True)
class SampleQuery:
    name: str
    query: str


def _templates(*pairs: Tuple[str, str]) -> List[SampleQuery]:
    return [SampleQuery(name=name, query=query) for name, query in pairs]


SAMPLE_QUERIES: Dict[str, List[SampleQuery]] = {
    "users": _templates(
        ("Select all users", "SELECT * FROM users"),
        (
            "Filter by department",
            "SELECT name, email, department FROM users WHERE department = 'Engineering'",
        ),
        ("Sort by salary", "SELECT name, salary FROM users ORDER BY salary DESC"),
        (
            "Count by department",
            "SELECT department, COUNT(*) as count FROM users GROUP BY department",
        ),
        (
            "Average salary by city",
            "SELECT city, AVG(salary) as avg_salary FROM users GROUP BY city",
        ),
    ),
    "posts": _templates(
        ("Select all posts", "SELECT * FROM posts"),
        (
            "Published posts only",
            "SELECT title, views, likes FROM posts WHERE published = true",
        ),
        (
            "Top posts by views",
            "SELECT title, views FROM posts ORDER BY views DESC LIMIT 5",
        ),
        ("Posts by user", "SELECT title, body FROM posts WHERE userId = 1"),
    ),
    "countries": _templates(
        ("Select all countries", "SELECT * FROM data"),
        (
            "Largest countries by area",
            "SELECT name_common, area FROM data ORDER BY area DESC LIMIT 10",
        ),
        (
            "Countries by continent",
            "SELECT continents, COUNT(*) as count FROM data GROUP BY continents",
        ),
        (
            "Most populous countries",
            "SELECT name_common, population FROM data ORDER BY population DESC LIMIT 20",
        ),
        (
            "Countries in Europe",
            "SELECT name_common, capital FROM data WHERE continents LIKE '%Europe%'",
        ),
    ),
    "crypto": _templates(
        ("Select all cryptocurrencies", "SELECT * FROM crypto"),
        (
            "Top by market cap",
            "SELECT name, current_price, market_cap FROM crypto "
            "ORDER BY market_cap DESC LIMIT 10",
        ),
    ),
    "spacex": _templates(
        ("All launches", "SELECT * FROM data"),
        (
            "Successful launches only",
            "SELECT mission_name, launch_date_utc, launch_success FROM data "
            "WHERE launch_success = true",
        ),
        (
            "Recent launches",
            "SELECT mission_name, launch_date_utc, launch_success FROM data "
            "ORDER BY launch_date_utc DESC LIMIT 10",
        ),
        (
            "Falcon Heavy launches",
            "SELECT mission_name, launch_date_utc, rocket_name FROM data "
            "WHERE rocket_name LIKE '%Falcon Heavy%'",
        ),
    ),
    "pokemon": _templates(
        ("All Pokemon", "SELECT * FROM data"),
        (
            "Top Pokemon by stats",
            "SELECT name, base_experience, height, weight FROM data "
            "ORDER BY base_experience DESC LIMIT 10",
        ),
        ("Fire type Pokemon", "SELECT name, types FROM data WHERE types LIKE '%fire%'"),
        (
            "Pokemon with most HP",
            "SELECT name, stats_hp FROM data ORDER BY stats_hp DESC LIMIT 10",
        ),
    ),
}

# Checked in order; the first family whose fields are all truthy wins.
_DETECTION_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("spacex", ("mission_name", "launch_date_utc")),
    ("pokemon", ("name", "types", "base_experience")),
    ("users", ("name", "email")),
    ("posts", ("title", "body")),
    ("countries", ("name", "population")),
    ("countries", ("name_common", "population")),
    ("crypto", ("name", "current_price")),
]

DEFAULT_FAMILY = "users"


def detect_family(record: Mapping[str, Any]) -> str:
    """Guess which well-known API a flattened record came from."""
    for family, required in _DETECTION_RULES:
        if all(record.get(field) for field in required):
            return family
    return DEFAULT_FAMILY


def sample_queries_for(record: Mapping[str, Any]) -> List[SampleQuery]:
    """Sample queries for the dataset whose first flattened row is ``record``."""
    return list(SAMPLE_QUERIES[detect_family(record)])
