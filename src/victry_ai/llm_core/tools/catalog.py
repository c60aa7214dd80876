"""Predefined resume-analysis tools and their default local handlers."""

import math
import re
from typing import Any, Dict, List, Mapping

from .models import ToolHandler
from .registry import ToolRegistry, create_tool

_WORD_SPLIT = re.compile(r"\W+")

_IMPORTANCE = {"type": "string", "enum": ["must_have", "nice_to_have", "preferred"]}


def _words(text: str) -> List[str]:
    return [word for word in _WORD_SPLIT.split(text.lower()) if word]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


keyword_extraction_tool = create_tool(
    "extract_keywords",
    "Extract relevant keywords from a text",
    {
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "The text to extract keywords from"},
            "maxKeywords": {"type": "number", "description": "Maximum number of keywords to extract"},
        },
        "required": ["text"],
    },
)

ats_score_tool = create_tool(
    "calculate_ats_score",
    "Calculate an ATS compatibility score for a resume against a job description",
    {
        "type": "object",
        "properties": {
            "resumeText": {"type": "string", "description": "The resume text"},
            "jobDescription": {"type": "string", "description": "The job description text"},
        },
        "required": ["resumeText", "jobDescription"],
    },
)

skill_matching_tool = create_tool(
    "match_skills",
    "Match resume skills with job description requirements",
    {
        "type": "object",
        "properties": {
            "resumeSkills": {
                "type": "array",
                "items": {"type": "string"},
                "description": "List of skills from the resume",
            },
            "jobSkills": {
                "type": "array",
                "items": {"type": "string"},
                "description": "List of skills from the job description",
            },
        },
        "required": ["resumeSkills", "jobSkills"],
    },
)


def _requirement_list(**properties: Any) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "object", "properties": properties}}


# Structured output only: Claude fills this tool's input, nothing executes it locally.
job_analysis_tool = create_tool(
    "job_analysis",
    "Tool for structured job description analysis",
    {
        "type": "object",
        "properties": {
            "hardSkills": _requirement_list(skill={"type": "string"}, importance=_IMPORTANCE),
            "softSkills": _requirement_list(skill={"type": "string"}, importance=_IMPORTANCE),
            "qualifications": {
                "type": "object",
                "properties": {
                    "experience": _requirement_list(description={"type": "string"}, importance=_IMPORTANCE),
                    "education": _requirement_list(
                        type={"type": "string"}, field={"type": "string"}, importance=_IMPORTANCE
                    ),
                    "certifications": _requirement_list(name={"type": "string"}, importance=_IMPORTANCE),
                },
            },
            "keywords": _requirement_list(
                text={"type": "string"}, frequency={"type": "number"}, context={"type": "string"}
            ),
            "companyCulture": _requirement_list(trait={"type": "string"}),
            "experienceLevel": {"type": "object", "properties": {"level": {"type": "string"}}},
        },
    },
)


async def extract_keywords(arguments: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Most frequent words of at least three characters, most frequent first."""
    max_keywords = int(arguments.get("maxKeywords", 10))
    counts: Dict[str, int] = {}
    for word in _words(arguments["text"]):
        if len(word) < 3:
            continue
        counts[word] = counts.get(word, 0) + 1

    # sorted() is stable: ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:max_keywords]
    return [{"word": word, "count": count} for word, count in ranked]


async def calculate_ats_score(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    """Keyword-overlap score between a resume and a job description, 0-100."""
    resume_words = {word for word in _words(arguments["resumeText"]) if len(word) > 3}
    job_words = {word for word in _words(arguments["jobDescription"]) if len(word) > 3}

    match_count = len(resume_words & job_words)
    denominator = min(len(job_words), 50)
    score = min(100, _round_half_up(match_count / denominator * 100)) if denominator else 0

    return {
        "score": score,
        "matchedWords": match_count,
        "feedback": f"Found {match_count} matching keywords between resume and job description.",
    }


async def match_skills(arguments: Mapping[str, Any]) -> Dict[str, Any]:
    """Case-insensitive comparison of resume skills against job skills."""
    resume_skills = list(dict.fromkeys(skill.lower() for skill in arguments["resumeSkills"]))
    job_skills = list(dict.fromkeys(skill.lower() for skill in arguments["jobSkills"]))

    matches = [skill for skill in resume_skills if skill in job_skills]
    missing = [skill for skill in job_skills if skill not in resume_skills]

    return {
        "matches": matches,
        "missing": missing,
        "matchCount": len(matches),
        "missingCount": len(missing),
        "matchPercentage": _round_half_up(len(matches) / len(job_skills) * 100) if job_skills else 0,
    }


DEFAULT_TOOL_HANDLERS: Dict[str, ToolHandler] = {
    "extract_keywords": extract_keywords,
    "calculate_ats_score": calculate_ats_score,
    "match_skills": match_skills,
}


def build_default_registry() -> ToolRegistry:
    """A registry holding the predefined tools that have local handlers."""
    registry = ToolRegistry()
    registry.register(keyword_extraction_tool, func=extract_keywords)
    registry.register(ats_score_tool, func=calculate_ats_score)
    registry.register(skill_matching_tool, func=match_skills)
    return registry
