from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from job_referral.parsing.parse import parse_document  # noqa: E402
from job_referral.resume.fields import extract_resume_fields  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Dump the fields extracted from a résumé as JSON.")
    parser.add_argument("path", help="Résumé file (.pdf or .txt)")
    parser.add_argument(
        "--out",
        default=None,
        help="Write JSON here instead of stdout",
    )
    parser.add_argument(
        "--show-text",
        action="store_true",
        help="Include the decoded text and decoder metadata in the output.",
    )
    args = parser.parse_args()

    extracted = parse_document(args.path)
    fields = extract_resume_fields(extracted.text)

    payload = {"fields": fields.model_dump(mode="json")}
    if args.show_text:
        payload["text"] = extracted.text
        payload["method"] = extracted.method
        payload["page_count"] = extracted.page_count
        payload["decoder_lengths"] = extracted.decoder_lengths
        payload["warnings"] = extracted.warnings

    output = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(output + "\n", encoding="utf-8")
    else:
        print(output)


if __name__ == "__main__":
    main()
