"""Issue derivation, sitewide folding, ranking and recommendations.

Issue messages are the product's user-facing (Dutch) wording and double as
the fold key: pages reporting the same message share one sitewide
:class:`Issue`.
"""

from __future__ import annotations

from typing import Iterable

from backend.analysis.models import Issue, IssueGuide, PageFacts, PageIssue, PageResult

SEVERITY_WEIGHT = {"error": 3, "warning": 2, "notice": 1}
TOP_ISSUES = 10
MAX_RECOMMENDATIONS = 5
ISSUE_SPECIFIC_RECOMMENDATIONS = 3

TITLE_MISSING = "Title tag ontbreekt"
TITLE_LENGTH = "Title lengte niet optimaal"
H1_MISSING = "H1 tag ontbreekt"
H1_MULTIPLE = "Meerdere H1 tags"
META_MISSING = "Meta description ontbreekt"
CANONICAL_MISSING = "Canonical URL ontbreekt"
ALT_MISSING_SUFFIX = "afbeeldingen zonder alt-text"


# ---------------------------------------------------------------------------
# Per-page derivation
# ---------------------------------------------------------------------------

def page_issues(facts: PageFacts) -> list[PageIssue]:
    """Return the issues one page contributes to a sitewide run."""
    issues: list[PageIssue] = []

    if not facts.title.exists:
        issues.append(PageIssue("error", TITLE_MISSING))
    elif not facts.title.is_optimal:
        issues.append(PageIssue("warning", TITLE_LENGTH))

    if not facts.h1.is_optimal:
        if facts.h1.count == 0:
            issues.append(PageIssue("error", H1_MISSING))
        else:
            issues.append(PageIssue("warning", H1_MULTIPLE))

    if not facts.meta.exists:
        issues.append(PageIssue("warning", META_MISSING))

    if facts.images.without_alt > 0:
        issues.append(
            PageIssue("warning", f"{facts.images.without_alt} {ALT_MISSING_SUFFIX}")
        )

    if not facts.canonical.exists:
        issues.append(PageIssue("notice", CANONICAL_MISSING))

    return issues


# ---------------------------------------------------------------------------
# Sitewide fold & ranking
# ---------------------------------------------------------------------------

def fold_issues(pages: Iterable[PageResult]) -> list[Issue]:
    """Merge the issues of every successful page, keyed by message.

    The first occurrence of a message creates the entry; later ones bump
    ``count`` and append the page URL.  Entries keep first-seen order.
    """
    table: dict[str, Issue] = {}
    for page in pages:
        if not page.ok:
            continue
        for issue in page.issues:
            existing = table.get(issue.message)
            if existing is None:
                table[issue.message] = Issue(
                    type=issue.type,
                    message=issue.message,
                    count=1,
                    affected_urls=[page.url],
                )
            else:
                existing.count += 1
                existing.affected_urls.append(page.url)
    return list(table.values())


def severity_weight(issue_type: str) -> int:
    return SEVERITY_WEIGHT.get(issue_type, 1)


def rank_issues(issues: list[Issue]) -> list[Issue]:
    """Sort by ``severity × count`` (descending); ties keep fold order."""
    return sorted(issues, key=lambda i: severity_weight(i.type) * i.count, reverse=True)


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

_ISSUE_RECOMMENDATIONS = (
    ("Title", "📝 Voeg unieke, beschrijvende titles toe aan {count} pagina's"),
    ("H1", "🏷️ Zorg voor één duidelijke H1 per pagina op {count} pagina's"),
    ("Meta description", "📄 Schrijf aantrekkelijke meta descriptions voor {count} pagina's"),
    ("alt-text", "🖼️ Voeg beschrijvende alt-teksten toe aan afbeeldingen op {count} pagina's"),
    ("Canonical", "🔗 Voeg een canonical tag toe op {count} pagina's"),
)


def triage_line(average_score: int) -> str:
    if average_score < 50:
        return "🚨 Prioriteit: Focus op basis SEO elementen (title, H1, meta description)"
    if average_score < 70:
        return "⚠️ Verbetering: Werk aan technische SEO aspecten"
    return "✅ Goed: Focus op content optimalisatie en gebruikerservaring"


def generate_recommendations(ranked: list[Issue], average_score: int) -> list[str]:
    """Triage line for the score bracket plus hints for the top issues."""
    recommendations = [triage_line(average_score)]
    for issue in ranked[:ISSUE_SPECIFIC_RECOMMENDATIONS]:
        for needle, template in _ISSUE_RECOMMENDATIONS:
            if needle in issue.message:
                recommendations.append(template.format(count=issue.count))
                break
    return recommendations[:MAX_RECOMMENDATIONS]


# ---------------------------------------------------------------------------
# Issue guide
# ---------------------------------------------------------------------------

_GUIDES: dict[str, IssueGuide] = {
    TITLE_MISSING: IssueGuide(
        "De title tag is een van de belangrijkste SEO elementen. Het verschijnt in "
        "zoekresultaten en browser tabs. Zonder title tag kunnen zoekmachines je "
        "pagina niet goed indexeren.",
        (
            "Voeg een <title> tag toe in de <head> sectie van elke pagina",
            "Gebruik unieke, beschrijvende titles voor elke pagina",
            "Plaats belangrijke keywords aan het begin van de title",
        ),
    ),
    TITLE_LENGTH: IssueGuide(
        "Title tags moeten tussen 30-60 karakters lang zijn. Te kort en je mist "
        "kansen voor keywords, te lang en ze worden afgeknipt in zoekresultaten.",
        (
            "Houd titles tussen 30-60 karakters lang",
            "Gebruik de belangrijkste keywords vooraan",
            "Maak elke title uniek en beschrijvend",
        ),
    ),
    H1_MISSING: IssueGuide(
        "Elke pagina moet precies één H1 tag hebben die de hoofdinhoud beschrijft. "
        "Dit helpt zoekmachines begrijpen waar je pagina over gaat.",
        (
            "Voeg één H1 tag toe per pagina",
            "Gebruik de H1 om de hoofdinhoud te beschrijven",
            "Plaats relevante keywords in de H1",
        ),
    ),
    H1_MULTIPLE: IssueGuide(
        "Een pagina mag maar één H1 tag hebben. Meerdere H1 tags verwarren "
        "zoekmachines over de hoofdinhoud van je pagina.",
        (
            "Gebruik slechts één H1 per pagina",
            "Verander extra H1 tags naar H2, H3, etc.",
            "Zorg dat de H1 de belangrijkste heading is",
        ),
    ),
    META_MISSING: IssueGuide(
        "Meta descriptions verschijnen onder je titel in zoekresultaten. Ze "
        "beïnvloeden de click-through rate en geven gebruikers een preview van je content.",
        (
            "Voeg een meta description toe van 120-160 karakters",
            "Maak het aantrekkelijk en actionable",
            "Gebruik relevante keywords natuurlijk",
        ),
    ),
    ALT_MISSING_SUFFIX: IssueGuide(
        "Alt-teksten beschrijven afbeeldingen voor zoekmachines en screenreaders. "
        "Afbeeldingen zonder alt-text missen die context.",
        (
            "Geef elke inhoudelijke afbeelding een korte, beschrijvende alt-text",
            "Gebruik een leeg alt-attribuut alleen voor decoratieve afbeeldingen",
            "Verwerk het keyword alleen waar het de afbeelding echt beschrijft",
        ),
    ),
    CANONICAL_MISSING: IssueGuide(
        "Een canonical tag vertelt zoekmachines welke URL de voorkeursversie van "
        "een pagina is en voorkomt duplicate content.",
        (
            "Voeg <link rel=\"canonical\" href=\"...\"> toe in de <head>",
            "Laat de canonical naar de eigen, schone URL verwijzen",
            "Gebruik absolute URL's in de canonical tag",
        ),
    ),
}

_FALLBACK_GUIDE = IssueGuide(
    "Dit is een SEO issue dat aandacht vereist. Bekijk de aanbevelingen hieronder "
    "voor specifieke oplossingen.",
    (
        "Bekijk SEO best practices voor dit specifieke probleem",
        "Test wijzigingen met SEO tools",
        "Monitor resultaten na implementatie",
    ),
)


def describe_issue(message: str) -> IssueGuide:
    """Return the explanation and remediation steps for an issue *message*."""
    for key, guide in _GUIDES.items():
        if key in message:
            return guide
    return _FALLBACK_GUIDE
