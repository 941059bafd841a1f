"""
Lexical signals for offline fallback generation.

Pure functions over text. Every result is ordered deterministically so
identical input always yields identical output.
"""

import re
from collections import Counter
from typing import Dict, List, Tuple

MIN_TOKEN_LENGTH = 4

_TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9+#]*(?:\.[a-z0-9]+)*")
_YEARS_PATTERN = re.compile(r"(\d{1,2})\+?\s*(?:years|yrs)")
_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
_PHONE_PATTERN = re.compile(r"\+?\d[\d\s().-]{7,}\d")

STOPWORDS = frozenset(
    {
        "able", "about", "above", "across", "after", "also", "among", "and",
        "been", "being", "both", "build", "built", "candidate", "company",
        "could", "each", "from", "have", "having", "including", "into",
        "just", "like", "looking", "made", "make", "more", "most", "must",
        "need", "other", "over", "plus", "preferred", "project", "projects",
        "required", "requirements", "responsibilities", "role", "should",
        "some", "such", "team", "teams", "than", "that", "their", "them",
        "then", "there", "these", "they", "this", "those", "through", "under",
        "upon", "used", "using", "very", "well", "were", "what", "when",
        "where", "which", "while", "will", "with", "within", "work", "worked",
        "would", "year", "years", "your", "ours",
    }
)

SECTION_MARKERS: Dict[str, Tuple[str, ...]] = {
    "contact": ("contact", "email", "phone", "linkedin", "github.com"),
    "experience": ("experience", "employment", "work history", "professional background"),
    "education": ("education", "university", "college", "degree", "bachelor", "master"),
    "skills": ("skills", "technologies", "tech stack", "proficiencies", "competencies"),
}

# Known skill -> role family. Insertion order is the detection order.
SKILL_DICTIONARY: Dict[str, str] = {
    "react": "frontend",
    "angular": "frontend",
    "vue": "frontend",
    "typescript": "frontend",
    "javascript": "frontend",
    "html": "frontend",
    "css": "frontend",
    "next.js": "frontend",
    "node.js": "backend",
    "python": "backend",
    "java": "backend",
    "golang": "backend",
    "django": "backend",
    "flask": "backend",
    "fastapi": "backend",
    "spring": "backend",
    "postgresql": "backend",
    "mongodb": "backend",
    "redis": "backend",
    "graphql": "backend",
    "pandas": "data",
    "numpy": "data",
    "tableau": "data",
    "spark": "data",
    "tensorflow": "data",
    "pytorch": "data",
    "aws": "cloud",
    "azure": "cloud",
    "docker": "cloud",
    "kubernetes": "cloud",
    "terraform": "cloud",
    "swift": "mobile",
    "kotlin": "mobile",
    "flutter": "mobile",
    "figma": "design",
    "sketch": "design",
}

ROLE_TITLES: Dict[str, str] = {
    "frontend": "Frontend Developer",
    "backend": "Backend Developer",
    "data": "Data Scientist",
    "cloud": "DevOps Engineer",
    "mobile": "Mobile Developer",
    "design": "UI/UX Designer",
}

DEFAULT_ROLE = "Software Engineer"

_SENIOR_MARKERS = ("senior", "lead", "principal", "staff", "head of", "architect")
_JUNIOR_MARKERS = ("junior", "intern", "graduate", "entry level", "entry-level")


def tokenize(text: str) -> List[str]:
    """
    Lowercase word tokens of at least four characters, stopwords removed.

    Args:
        text: Free text

    Returns:
        Tokens in order of appearance
    """
    tokens = []
    for token in _TOKEN_PATTERN.findall((text or "").lower()):
        token = token.rstrip(".")
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS:
            tokens.append(token)
    return tokens


def extract_keywords(text: str, limit: int = 20) -> List[str]:
    """
    Most frequent tokens, ties broken by first occurrence.

    Args:
        text: Free text
        limit: Maximum keywords

    Returns:
        Keywords
    """
    tokens = tokenize(text)
    counts = Counter(tokens)
    first_seen: Dict[str, int] = {}
    for index, token in enumerate(tokens):
        first_seen.setdefault(token, index)

    ranked = sorted(counts, key=lambda t: (-counts[t], first_seen[t]))
    return ranked[:limit]


def coverage(keywords: List[str], text: str) -> Tuple[List[str], List[str], float]:
    """
    Split reference keywords by presence in a candidate text.

    Args:
        keywords: Reference keywords
        text: Candidate text

    Returns:
        (matched, missing, ratio); ratio is 0.0 without keywords
    """
    present = set(tokenize(text))
    matched = [k for k in keywords if k in present]
    missing = [k for k in keywords if k not in present]
    ratio = len(matched) / len(keywords) if keywords else 0.0
    return matched, missing, ratio


def detect_sections(text: str) -> Dict[str, bool]:
    """
    Check for recognizable resume sections.

    Args:
        text: Resume text

    Returns:
        Section name -> present
    """
    lowered = (text or "").lower()
    sections = {
        name: any(marker in lowered for marker in markers)
        for name, markers in SECTION_MARKERS.items()
    }
    if _EMAIL_PATTERN.search(lowered) or _PHONE_PATTERN.search(lowered):
        sections["contact"] = True
    return sections


def section_ratio(sections: Dict[str, bool]) -> float:
    """Fraction of known sections present."""
    if not sections:
        return 0.0
    return sum(1 for present in sections.values() if present) / len(sections)


def detect_skills(text: str) -> List[str]:
    """
    Known skills mentioned in text.

    Args:
        text: Free text

    Returns:
        Skills in dictionary order
    """
    present = set(_TOKEN_PATTERN.findall((text or "").lower()))
    present.update(token.rstrip(".") for token in list(present))
    return [skill for skill in SKILL_DICTIONARY if skill in present]


def rank_role_families(skills: List[str]) -> List[Tuple[str, List[str]]]:
    """
    Group skills by role family, strongest family first.

    Args:
        skills: Detected skills

    Returns:
        (family, skills) pairs; ties keep dictionary order
    """
    families: Dict[str, List[str]] = {}
    for skill in skills:
        families.setdefault(SKILL_DICTIONARY[skill], []).append(skill)

    order = list(ROLE_TITLES)
    return sorted(families.items(), key=lambda item: (-len(item[1]), order.index(item[0])))


def primary_role(skills: List[str]) -> str:
    """Role title for the strongest skill family."""
    ranked = rank_role_families(skills)
    if not ranked:
        return DEFAULT_ROLE
    return ROLE_TITLES[ranked[0][0]]


def detect_seniority(text: str) -> str:
    """
    Rough seniority from explicit markers or stated years.

    Args:
        text: Resume text

    Returns:
        "Senior", "Mid-level" or "Junior"
    """
    lowered = (text or "").lower()
    if any(marker in lowered for marker in _SENIOR_MARKERS):
        return "Senior"
    if any(marker in lowered for marker in _JUNIOR_MARKERS):
        return "Junior"

    years = [int(y) for y in _YEARS_PATTERN.findall(lowered)]
    if years and max(years) >= 7:
        return "Senior"
    if years and max(years) < 2:
        return "Junior"
    return "Mid-level"


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """
    Round half away from zero and clamp.

    Args:
        value: Raw score
        low: Minimum
        high: Maximum

    Returns:
        Integer score in [low, high]
    """
    rounded = int(value + 0.5) if value >= 0 else -int(-value + 0.5)
    return max(low, min(high, rounded))
