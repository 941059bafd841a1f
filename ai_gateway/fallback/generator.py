"""
Deterministic offline fallback generator.

Sandi Metz Principles:
- Single Responsibility: Produce degraded but schema-valid bodies
- Open/Closed: One strategy per feature kind
- No I/O: Pure function of the request payload

Used when the upstream quota is exhausted. Output has the same shape as
a validated upstream response plus fallback markers, and is never
cached.
"""

from typing import Any, Callable, Dict, List, Mapping

from ai_gateway.fallback import lexical
from ai_gateway.features.registry import FeatureKind
from ai_gateway.features.schemas import (
    ATSScoreResult,
    BulletsResult,
    CategoryScores,
    FeatureResult,
    JobMatch,
    JobMatchResult,
    KeywordAnalysis,
    KeywordsResult,
    SummaryResult,
)

QUOTA_NOTE = (
    "AI service quota reached. This result was generated offline from "
    "keyword analysis and is less detailed than usual."
)
DEGENERATE_NOTE = "Not enough input text to analyze. Add more detail and try again."

ACTION_VERBS = (
    "Delivered",
    "Improved",
    "Developed",
    "Streamlined",
    "Led",
    "Implemented",
    "Optimized",
    "Collaborated on",
)

BASE_RECOMMENDATION = (
    "Ensure the top 5 job description keywords appear clearly in your "
    "summary and skills section."
)

MAX_FALLBACK_MATCHES = 4

_SECTION_LABELS = {
    "contact": "contact information",
    "experience": "a work experience section",
    "education": "an education section",
    "skills": "a skills section",
}


def _text(payload: Mapping[str, Any], name: str) -> str:
    """Read a text field given in snake_case or camelCase."""
    head, *rest = name.split("_")
    camel = head + "".join(part.capitalize() for part in rest)
    value = payload.get(name, payload.get(camel, ""))
    return str(value or "").strip()


def _int(payload: Mapping[str, Any], name: str, default: int) -> int:
    try:
        return int(payload.get(name, default))
    except (TypeError, ValueError):
        return default


class FallbackGenerator:
    """
    Offline generator for degraded responses.

    generate() never raises for missing or empty fields; degenerate
    input produces the minimum valid result and an explanatory note.
    """

    def __init__(self):
        self._strategies: Dict[FeatureKind, Callable[[Mapping[str, Any]], FeatureResult]] = {
            FeatureKind.ATS_SCORE: self._ats_score,
            FeatureKind.JOB_MATCH: self._job_match,
            FeatureKind.SUMMARY: self._summary,
            FeatureKind.BULLETS: self._bullets,
            FeatureKind.KEYWORDS: self._keywords,
        }

    def generate(self, feature: FeatureKind | str, payload: Mapping[str, Any]) -> dict:
        """
        Generate a degraded response body.

        Args:
            feature: Feature kind
            payload: Request payload (snake_case or camelCase keys)

        Returns:
            Response body with fallback and quotaExceeded set
        """
        kind = FeatureKind(feature)
        result = self._strategies[kind](payload or {})
        result.fallback = True
        result.quota_exceeded = True
        if result.note is None:
            result.note = QUOTA_NOTE
        return result.to_body()

    @staticmethod
    def _ats_score(payload: Mapping[str, Any]) -> ATSScoreResult:
        resume = _text(payload, "resume_text")
        job_description = _text(payload, "job_description")
        if not resume or not job_description:
            return ATSScoreResult(score=0, note=DEGENERATE_NOTE)

        keywords = lexical.extract_keywords(job_description, limit=25)
        matched, missing, ratio = lexical.coverage(keywords, resume)
        sections = lexical.detect_sections(resume)
        structure = lexical.section_ratio(sections)

        score = lexical.clamp_score(ratio * 70 + structure * 30)
        categories = CategoryScores(
            contact_info=100 if sections["contact"] else 0,
            work_experience=lexical.clamp_score(
                (60 if sections["experience"] else 20) + ratio * 40
            ),
            education=80 if sections["education"] else 30,
            skills=lexical.clamp_score(
                (50 if sections["skills"] else 10) + ratio * 50
            ),
            formatting=lexical.clamp_score(structure * 100),
            keywords=lexical.clamp_score(ratio * 100),
        )
        analysis = KeywordAnalysis(
            total_keywords=len(keywords),
            matched_keywords=matched,
            missing_keywords=missing,
            match_percentage=lexical.clamp_score(ratio * 100),
        )

        return ATSScoreResult(
            score=score,
            missing_keywords=missing[:10],
            recommendations=FallbackGenerator._ats_recommendations(sections, missing),
            category_scores=categories,
            keyword_analysis=analysis,
        )

    @staticmethod
    def _ats_recommendations(sections: Dict[str, bool], missing: List[str]) -> List[str]:
        recommendations = [
            f"Add {_SECTION_LABELS[name]} so ATS parsers can find it."
            for name, present in sections.items()
            if not present
        ]
        if missing:
            recommendations.append(
                "Work these job description keywords into your experience: "
                + ", ".join(missing[:5])
                + "."
            )
        recommendations.append(BASE_RECOMMENDATION)
        return recommendations

    @staticmethod
    def _job_match(payload: Mapping[str, Any]) -> JobMatchResult:
        resume = _text(payload, "resume_text")
        location = _text(payload, "location")
        skills = lexical.detect_skills(resume)
        if not resume or not skills:
            return JobMatchResult(
                suggestions=["List your core technical skills so roles can be matched."],
                note=DEGENERATE_NOTE,
            )

        seniority = lexical.detect_seniority(resume)
        prefix = "" if seniority == "Mid-level" else f"{seniority} "
        matches = []
        for rank, (family, family_skills) in enumerate(
            lexical.rank_role_families(skills)[:MAX_FALLBACK_MATCHES]
        ):
            title = f"{prefix}{lexical.ROLE_TITLES[family]}"
            matches.append(
                JobMatch(
                    title=title,
                    fit_score=lexical.clamp_score(
                        45 + 10 * len(family_skills) - 10 * rank, high=95
                    ),
                    summary=f"Matches your experience with {', '.join(family_skills[:4])}.",
                    keywords=family_skills,
                    query=f"{title} {location}".strip(),
                )
            )

        return JobMatchResult(
            matches=matches,
            suggestions=[
                "Quantify achievements for your strongest skills.",
                "Tailor your summary to the first suggested role.",
            ],
        )

    @staticmethod
    def _summary(payload: Mapping[str, Any]) -> SummaryResult:
        resume = _text(payload, "resume_text")
        if not resume:
            return SummaryResult(summary="", note=DEGENERATE_NOTE)

        skills = lexical.detect_skills(resume)
        role = _text(payload, "target_role") or lexical.primary_role(skills)
        seniority = lexical.detect_seniority(resume)
        focus = skills[:4] or lexical.extract_keywords(resume, limit=4)

        summary = f"{seniority} {role}"
        if focus:
            summary += f" with hands-on experience in {', '.join(focus)}"
        summary += (
            ". Known for delivering reliable results, collaborating across "
            "functions and learning new tools quickly."
        )
        return SummaryResult(summary=summary)

    @staticmethod
    def _bullets(payload: Mapping[str, Any]) -> BulletsResult:
        description = _text(payload, "description")
        role = _text(payload, "role") or "the role"
        count = max(1, min(8, _int(payload, "count", 4)))
        keywords = lexical.extract_keywords(
            description + "\n" + _text(payload, "job_description"), limit=count * 2
        )
        if not description or not keywords:
            return BulletsResult(note=DEGENERATE_NOTE)

        bullets = []
        for index in range(count):
            verb = ACTION_VERBS[index % len(ACTION_VERBS)]
            pair = keywords[(index * 2) % len(keywords) : (index * 2) % len(keywords) + 2]
            bullets.append(
                f"{verb} {' and '.join(pair)} initiatives as {role} "
                "with measurable impact (add your metrics)."
            )
        return BulletsResult(bullets=bullets)

    @staticmethod
    def _keywords(payload: Mapping[str, Any]) -> KeywordsResult:
        job_description = _text(payload, "job_description")
        keywords = lexical.extract_keywords(job_description, limit=20)
        if not keywords:
            return KeywordsResult(note=DEGENERATE_NOTE)

        matched, missing, _ = lexical.coverage(keywords, _text(payload, "resume_text"))
        return KeywordsResult(
            keywords=keywords, matched_keywords=matched, missing_keywords=missing
        )
