from app.services.verification import VERIFIED, FILE_MISSING

STATUS_LABELS = {
    VERIFIED: "Verified",
    FILE_MISSING: "Files Missing",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, "Not Found")


def single_report(result: dict) -> dict:
    """Single verification result with its display label"""
    return {**result, "statusLabel": status_label(result["status"])}


def bulk_report(results: list[dict]) -> dict:
    """Aggregate of a bulk run. totalChecked always equals verified + issues."""
    items = [single_report(r) for r in results]
    verified = sum(1 for r in items if r["status"] == VERIFIED)

    return {
        "totalChecked": len(items),
        "verified": verified,
        "issues": len(items) - verified,
        "results": items,
    }


def summary_line(report: dict) -> str:
    line = f"{report['totalChecked']} checked, {report['verified']} verified, {report['issues']} with issues"
    missing = [r["title"] for r in report["results"] if r["status"] != VERIFIED]
    if missing:
        line += f" (missing: {', '.join(missing)})"
    return line
