"""Prompt templates for chat answers and report drafts."""

from ..models.chat import ProjectMeta

SYSTEM_PROMPT = """You are the analysis engine inside a desktop app called Data Confessional.
The app helps business users turn raw data into honest summaries, dashboards, and reports.

You always:
- Focus only on the data and context provided.
- Separate what the data clearly shows from what is speculative.
- Mention gaps or missing information explicitly.
- Use concise, plain language.

When asked to answer questions about data, use this structure:

CONFESSION: A direct, one-paragraph answer.
EVIDENCE: Bullet points with exact numbers and references to tables or charts.
CAVEATS: Any uncertainties, missing segments, or data limitations."""

GOSSIP_STYLE = """STYLE:
- Keep the same structure (CONFESSION / EVIDENCE / CAVEATS).
- In CONFESSION, you may use more playful, "data gossip" style phrasing.
- EVIDENCE and CAVEATS must stay serious and precise."""

USER_PROMPT = """CONTEXT:
- Project name: {name}
- Intended audience: {audience}
- Data summary:

{context_summary}

TASK:

Answer the user's question about this project using ONLY the context above.
Use the output structure:

CONFESSION:

...

EVIDENCE:

- ...

CAVEATS:

- ...

QUESTION:

{question}"""

REPORT_PROMPT = """You are drafting a report for Data Confessional.

PROJECT DATA:

{data_summary}

REPORT TEMPLATE:

- Type: {template_type}
- Audience: {audience}  (one of: self, team, exec)

Write a markdown report following this structure:

# Title

## Executive Summary

- 3-5 bullets describing the main truths the data reveals.

## Key Findings

- Short paragraphs for each major insight.
- Include concrete numbers where possible.

## Supporting Evidence

- Bullet lists tying findings to specific metrics, tables, or charts.

## Risks and Questions

- 3-5 bullets.

## Next Steps

- 3-5 recommended actions.

Constraints:

- Do not invent data you do not see in PROJECT DATA.
- Call out missing or incomplete data under "Risks and Questions"."""


def build_system_prompt(role: str) -> str:
    if role == "gossip":
        return f"{SYSTEM_PROMPT}\n\n{GOSSIP_STYLE}"
    return SYSTEM_PROMPT


def build_user_prompt(question: str, context_summary: str, project_meta: ProjectMeta) -> str:
    return USER_PROMPT.format(
        name=project_meta.name,
        audience=project_meta.audience,
        context_summary=context_summary,
        question=question,
    )


def build_report_prompt(template_type: str, audience: str, data_summary: str) -> str:
    return REPORT_PROMPT.format(
        data_summary=data_summary,
        template_type=template_type,
        audience=audience,
    )
