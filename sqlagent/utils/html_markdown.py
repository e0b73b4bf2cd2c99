"""Convert stored HTML project summaries into chat-friendly Markdown."""

import re

_TAG_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE | re.DOTALL), replacement)
    for pattern, replacement in (
        (r"<h1[^>]*>(.*?)</h1>", r"\n# \1\n"),
        (r"<h2[^>]*>(.*?)</h2>", r"\n## \1\n"),
        (r"<h3[^>]*>(.*?)</h3>", r"\n### \1\n"),
        (r"<h4[^>]*>(.*?)</h4>", r"\n#### \1\n"),
        (r"<h5[^>]*>(.*?)</h5>", r"\n##### \1\n"),
        (r"<h6[^>]*>(.*?)</h6>", r"\n###### \1\n"),
        (r"<p[^>]*>(.*?)</p>", r"\n\1\n"),
        (r"</?[uo]l[^>]*>", "\n"),
        (r"<li[^>]*>(.*?)</li>", r"• \1\n"),
        (r"<strong[^>]*>(.*?)</strong>", r"**\1**"),
        (r"<b(?:\s[^>]*)?>(.*?)</b>", r"**\1**"),
        (r"<em[^>]*>(.*?)</em>", r"*\1*"),
        (r"<i(?:\s[^>]*)?>(.*?)</i>", r"*\1*"),
        (r"<a[^>]*href=[\"']([^\"']*)[\"'][^>]*>(.*?)</a>", r"[\2](\1)"),
        (r"<br[^>]*>", "\n"),
        (r"<hr[^>]*>", "\n---\n"),
        (r"<[^>]*>", ""),
    )
)

SECTION_HEADINGS: dict[str, str] = {
    "Brief project description": "📝 **Brief Project Description**",
    "Problem statement being addressed": "❓ **Problem Statement**",
    "Description of technology used or developed": "💻 **Technology Used**",
    "Required Resources": "🔧 **Required Resources**",
    "Team Members and Roles": "👥 **Team Members and Roles**",
    "Milestones": "🎯 **Milestones**",
    "Key Challenges and Focus Areas": "⚡ **Key Challenges**",
    "Details of experimentation and R&D activities": "🔬 **R&D Activities**",
    "Scalability and Future Growth": "📈 **Scalability & Growth**",
    "Progress Tracking and Reporting": "📊 **Progress Tracking**",
    "Project Timeline": "⏱️ **Project Timeline**",
    "Commentary on research and development involved": "💡 **R&D Commentary**",
}


def html_to_markdown(html: str | None) -> str:
    """Rewrite headings, lists, emphasis and links; strip every other tag."""
    if not html:
        return "No content available."

    markdown = html
    for pattern, replacement in _TAG_RULES:
        markdown = pattern.sub(replacement, markdown)

    markdown = re.sub(r"\n\s*\n\s*\n", "\n\n", markdown).strip()

    for heading, decorated in SECTION_HEADINGS.items():
        markdown = re.sub(rf"^### {re.escape(heading)}", decorated, markdown, flags=re.MULTILINE)

    return markdown
