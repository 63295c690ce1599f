"""
Prompt builders for the Critic and Finder roles.

The Critic is a plain text-in/text-out capability, so every instruction it
needs (role, criteria, output format) travels inside the prompt itself.
"""

DEFAULT_FINDINGS_LIMIT = 2000

VERDICT_FORMAT = """```json
{
  "isSatisfactory": true/false,
  "qualityScore": 1-10,
  "gaps": ["specific gap"],
  "followUpQuestions": ["targeted question"],
  "refinedQuery": "a more focused query for the most critical gap",
  "reasoning": "why this score was given"
}
```"""

DECOMPOSITION_TEMPLATE = """# Research Planning

You are a research planning specialist. Decompose the research question below
into focused sub-tasks that will be researched one at a time.

## Research Question
{query}

## Sub-Task Rules
- Produce between {min_subtasks} and {max_subtasks} sub-tasks; consolidate rather than exceed {max_subtasks}
- Each sub-task targets ONE distinct aspect; sub-tasks must not overlap
- "query" must be a specific, searchable query that works well with web search
- "rationale" explains why the aspect needs its own investigation
- "expectedOutcome" describes what information success looks like
- "id" values are sequential integers starting at 1
- "dependsOn" lists ids of EARLIER sub-tasks whose findings this one builds on; use [] when independent

## Output Format
Respond with exactly this JSON structure:

```json
{{
  "isSatisfactory": false,
  "qualityScore": 0,
  "gaps": [],
  "followUpQuestions": [],
  "refinedQuery": null,
  "reasoning": "why the question was split this way",
  "subTasks": [
    {{
      "id": 1,
      "query": "specific searchable query",
      "rationale": "why this aspect matters",
      "dependsOn": [],
      "expectedOutcome": "what this should uncover"
    }}
  ]
}}
```
"""

EVALUATION_TEMPLATE = """# Research Evaluation

You are a rigorous research quality evaluator. Assume findings are incomplete
until the text proves otherwise; generic or surface-level answers score low.

## Original Research Question
{original_query}

## Current Sub-Task Query
{subtask_query}

## Expected Outcome
{expected_outcome}

## Research Findings
{findings}

---
Judge completeness, depth and specificity, evidence and sources, relevance,
and analysis. Score 1-3 for off-topic or wrong, 4-5 for major gaps, 6-7 for
adequate but missing specifics, 8 for comprehensive with minor gaps, and 9-10
for exceptional. Set isSatisfactory only when you cannot name a critical gap.
Gaps must be specific. Leave refinedQuery empty only if the research is
truly complete.

Respond with your assessment in this JSON structure:

{verdict_format}
"""

REFINEMENT_TEMPLATE = """# Follow-up Research

Continue researching the topic below. A reviewer found the previous attempt
incomplete; focus on closing the listed gaps rather than repeating what is
already covered.

## Focus Query
{next_query}

## Previous Findings (excerpt)
{previous_findings}

## Reviewer Assessment
Score: {quality_score}/10
Reasoning: {reasoning}

## Gaps To Fill
{gaps}
"""

SYNTHESIS_TEMPLATE = """# Research Synthesis

You are a research synthesis specialist. Combine the findings from {count}
focused sub-tasks into one comprehensive, publication-quality report that
directly answers the original question.

## Original Question
{original_query}

## Sub-Task Findings
{aggregate}

---
Requirements:
- Integrate findings across sub-tasks instead of concatenating them
- Do NOT drop details: keep every specific fact, number, name, and source
- Resolve contradictions and call out cross-cutting patterns
- Structure: executive summary, findings by theme (## / ### headings),
  analysis, conclusions and recommendations, sources
- Use tables for comparisons where helpful

First emit a JSON assessment of the combined research:

{verdict_format}

After the JSON, write the COMPLETE synthesized report in markdown.
"""

EMPTY_GAPS = "- (none listed)"


def truncate(text: str, limit: int) -> str:
	"""Cut text to limit characters, marking the cut."""
	if limit <= 0 or len(text) <= limit:
		return text
	return text[:limit].rstrip() + "\n...[truncated]"


def build_decomposition_prompt(query: str, min_subtasks: int = 2, max_subtasks: int = 6) -> str:
	return DECOMPOSITION_TEMPLATE.format(
		query=query,
		min_subtasks=min_subtasks,
		max_subtasks=max_subtasks,
	)


def build_evaluation_prompt(
	original_query: str,
	subtask_query: str,
	expected_outcome: str,
	findings: str,
) -> str:
	return EVALUATION_TEMPLATE.format(
		original_query=original_query,
		subtask_query=subtask_query,
		expected_outcome=expected_outcome or "Comprehensive, specific answer to the query",
		findings=findings,
		verdict_format=VERDICT_FORMAT,
	)


def build_refinement_prompt(
	next_query: str,
	previous_findings: str,
	quality_score: int,
	reasoning: str,
	gaps: list[str],
	findings_limit: int = DEFAULT_FINDINGS_LIMIT,
) -> str:
	"""Build the Finder query for iteration two onward."""
	gap_lines = "\n".join(f"- {gap}" for gap in gaps if gap.strip()) or EMPTY_GAPS
	return REFINEMENT_TEMPLATE.format(
		next_query=next_query,
		previous_findings=truncate(previous_findings, findings_limit),
		quality_score=quality_score,
		reasoning=reasoning or "(none given)",
		gaps=gap_lines,
	)


def build_synthesis_prompt(original_query: str, aggregate: str, count: int) -> str:
	return SYNTHESIS_TEMPLATE.format(
		original_query=original_query,
		aggregate=aggregate,
		count=count,
		verdict_format=VERDICT_FORMAT,
	)
