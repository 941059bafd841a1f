"""
Prompt builders for AI features.

Each builder turns a validated request into the text sent upstream and
pins the JSON shape the response parser expects.
"""

from ai_gateway.features.schemas import (
    ATSScoreRequest,
    BulletsRequest,
    JobMatchRequest,
    KeywordsRequest,
    SummaryRequest,
)

JSON_ONLY = "Return ONLY valid JSON. No markdown, no explanations, just the JSON object."


def build_ats_prompt(request: ATSScoreRequest) -> str:
    return (
        "You are an expert ATS (Applicant Tracking System) analyzer. "
        "Score how well the resume matches the job description.\n\n"
        f"JOB DESCRIPTION:\n{request.job_description}\n\n"
        f"RESUME:\n{request.resume_text}\n\n"
        "Return a JSON object with this exact structure:\n"
        '{"score": <0-100>, "missingKeywords": [string], '
        '"recommendations": [string], "categoryScores": {"contactInfo": <0-100>, '
        '"workExperience": <0-100>, "education": <0-100>, "skills": <0-100>, '
        '"formatting": <0-100>, "keywords": <0-100>}}\n'
        f"{JSON_ONLY}"
    )


def build_job_match_prompt(request: JobMatchRequest) -> str:
    return (
        "You are a career assistant. Suggest 6 matching job roles for this "
        "candidate based on their resume.\n"
        'Return strictly JSON: {"matches": [{"title": string, "company": string, '
        '"fitScore": number, "summary": string, "keywords": [string], '
        '"query": string}], "suggestions": [string]}.\n'
        "fitScore is 0-100. Keep summaries to 1-2 sentences.\n"
        f"Location (optional): {request.location}\n"
        f"Preferences (optional): {request.preferences}\n"
        f"RESUME:\n{request.resume_text}\nJSON:"
    )


def build_summary_prompt(request: SummaryRequest) -> str:
    target = f" targeting a {request.target_role} role" if request.target_role else ""
    return (
        f"Write a 3-4 sentence professional resume summary{target} "
        "based on the resume below.\n\n"
        f"RESUME:\n{request.resume_text}\n\n"
        'Return JSON: {"summary": string}\n'
        f"{JSON_ONLY}"
    )


def build_bullets_prompt(request: BulletsRequest) -> str:
    company = f" at {request.company}" if request.company else ""
    target = (
        f"\nTailor them to this job description:\n{request.job_description}\n"
        if request.job_description
        else ""
    )
    return (
        f"Write {request.count} quantified, action-verb resume bullets for a "
        f"{request.role}{company}.\n\n"
        f"ROLE DESCRIPTION:\n{request.description}\n{target}\n"
        'Return JSON: {"bullets": [string]}\n'
        f"{JSON_ONLY}"
    )


def build_keywords_prompt(request: KeywordsRequest) -> str:
    resume = f"\nRESUME:\n{request.resume_text}\n" if request.resume_text else ""
    return (
        "Extract the 10-20 most important ATS keywords and skills from the job "
        "description. If a resume is given, split them by whether the resume "
        "already contains them.\n\n"
        f"JOB DESCRIPTION:\n{request.job_description}\n{resume}\n"
        'Return JSON: {"keywords": [string], "matchedKeywords": [string], '
        '"missingKeywords": [string]}\n'
        f"{JSON_ONLY}"
    )
