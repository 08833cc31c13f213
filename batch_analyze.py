"""Batch-score contact websites and append CASH results to the CSV."""

import csv
import http.client
import json
import ssl
import time
from urllib.parse import urlparse

BASE_URL = "https://cash-audit-production.up.railway.app"
CSV_PATH = "Contacts_With_Websites.csv"
OUTPUT_PATH = "Contacts_With_Websites.csv"

RESULT_COLUMNS = ["CASH Score", "Business Type", "Monthly Loss", "Top Offer", "Report URL"]


def clean_url(url):
    """Strip path/query to get homepage URL."""
    parsed = urlparse(url.strip())
    return "{0}://{1}".format(parsed.scheme, parsed.netloc)


def analyze(url):
    """
    POST the URL to /api/analyze.
    Returns the analysis dict on success, None on failure.
    """
    parsed = urlparse(BASE_URL)
    ctx = ssl.create_default_context()
    conn = http.client.HTTPSConnection(parsed.netloc, timeout=180, context=ctx)

    try:
        body = json.dumps({"url": url, "pdf": True})
        conn.request("POST", "/api/analyze", body=body, headers={"Content-Type": "application/json"})
        resp = conn.getresponse()
        data = json.loads(resp.read().decode("utf-8", errors="replace") or "{}")

        if resp.status != 200:
            print("    HTTP {0}: {1}".format(resp.status, data.get("message") or data.get("error")))
            return None
        return data
    except (OSError, http.client.HTTPException, ValueError) as e:
        print("    CONNECTION ERROR: " + str(e), flush=True)
        return None
    finally:
        conn.close()


def result_columns(result):
    """Flatten the fields the sales team sorts by."""
    score = result["score"]
    offers = score.get("offers", [])
    loss = next((o["monetized_loss"] for o in offers if o.get("monetized_loss") is not None), None)
    return {
        "CASH Score": str(score["scores"]["overall"]),
        "Business Type": score.get("detected_business_type") or "",
        "Monthly Loss": "${0:,}".format(loss) if loss is not None else "",
        "Top Offer": offers[0]["label"] if offers else "",
        "Report URL": BASE_URL + result["report_url"] if result.get("report_url") else "",
    }


def main():
    # Read CSV
    with open(CSV_PATH, newline="") as f:
        reader = csv.DictReader(f)
        rows = list(reader)
        fieldnames = list(reader.fieldnames)

    for column in RESULT_COLUMNS:
        if column not in fieldnames:
            fieldnames.append(column)

    total = len(rows)
    success = 0
    failed = 0

    for i, row in enumerate(rows):
        deal = row["Deal Name"].strip()
        clean = clean_url(row["Current Website"])
        print("\n[{0}/{1}] {2} -> {3}".format(i + 1, total, deal, clean), flush=True)

        result = analyze(clean)

        if result:
            row.update(result_columns(result))
            success += 1
            print("    DONE -> score {0}".format(row["CASH Score"]), flush=True)
        else:
            row.update({column: "" for column in RESULT_COLUMNS})
            failed += 1
            print("    FAILED", flush=True)

        # Write CSV after each row (in case of crash)
        with open(OUTPUT_PATH, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)

        # Small delay between requests
        time.sleep(2)

    print("\n" + "=" * 60, flush=True)
    print("Done! Success: {0}, Failed: {1}".format(success, failed), flush=True)
    print("Updated CSV: " + OUTPUT_PATH, flush=True)


if __name__ == "__main__":
    main()
