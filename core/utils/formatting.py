"""Formatting utilities for common data types."""

from typing import Optional
import re


def format_salary_range(salary_min: Optional[int], salary_max: Optional[int]) -> str:
    """
    Format a salary band in thousands of dollars.

    Args:
        salary_min: Lower bound in dollars (optional)
        salary_max: Upper bound in dollars (optional)

    Returns:
        "$120k - $150k", "From $80k", "Up to $90k" or
        "Salary not specified"
    """
    if not salary_min and not salary_max:
        return "Salary not specified"
    if salary_min and salary_max:
        return f"${salary_min / 1000:.0f}k - ${salary_max / 1000:.0f}k"
    if salary_min:
        return f"From ${salary_min / 1000:.0f}k"
    return f"Up to ${salary_max / 1000:.0f}k"


def format_percentage(value: float, decimals: int = 1) -> str:
    """
    Format value as percentage.

    Args:
        value: Value to format (already scaled to 0-100)
        decimals: Number of decimal places

    Returns:
        Formatted percentage string
    """
    return f"{value:.{decimals}f}%"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted file size string
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} TB"


def file_extension(filename: str, default: str = "pdf") -> str:
    """
    Lower-cased extension of an uploaded file name, without the dot.

    Anything that is not plain alphanumerics falls back to ``default`` so
    the value is always safe to embed in a storage key.
    """
    if "." not in filename:
        return default
    ext = filename.rsplit(".", 1)[-1].lower()
    if not re.fullmatch(r"[a-z0-9]{1,10}", ext):
        return default
    return ext


def normalize_skills(skills: list[str]) -> list[str]:
    """
    Trim skill names and drop blanks, keeping the original order.

    Args:
        skills: Raw skill names

    Returns:
        Cleaned list
    """
    return [s.strip() for s in skills if s and s.strip()]


LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """
    Escape LIKE wildcards so ``text`` matches literally.

    Use with ``escape=LIKE_ESCAPE`` on the ``like``/``ilike`` call.
    """
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
