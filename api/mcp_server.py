"""MCP server for Minneapolis police use-of-force data."""

from __future__ import annotations

from fastmcp import FastMCP

from api import queries

mcp = FastMCP(
    "Minneapolis Police Use of Force",
    instructions=(
        "Minneapolis Police Department use-of-force cases. Call "
        "get_available_years first to see which years have data. Each case "
        "carries a response date, the problem description, coordinates, "
        "precinct and neighborhood, and when recorded the force type applied "
        "and the subject's race, sex, and age."
    ),
)


@mcp.tool()
def get_available_years() -> list[str]:
    """Years for which case records exist."""
    return queries.get_available_years()


@mcp.tool()
def get_cases_by_year(year: int) -> list[dict]:
    """All cases for a year, each with its nested force action and subject."""
    return queries.get_cases_by_year(year)


@mcp.tool()
def get_demographics(year: int) -> dict:
    """Subject race and sex counts for a year."""
    return queries.get_demographics(year)


def main():
    mcp.run()


if __name__ == "__main__":
    main()
