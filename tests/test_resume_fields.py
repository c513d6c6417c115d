import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from job_referral.resume.chronology import (  # noqa: E402
    derive_current_employer,
    derive_highest_education,
    parse_date_entry,
    scan_chronology,
)
from job_referral.resume.fields import (  # noqa: E402
    extract_age,
    extract_email,
    extract_name,
    extract_phone,
    extract_resume_fields,
    extract_section,
)
from job_referral.schemas import DateEntry  # noqa: E402

FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"


class ResumeFixtureTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        text = (FIXTURES_DIR / "resume_tanaka.txt").read_text(encoding="utf-8")
        cls.fields = extract_resume_fields(text)

    def test_identity_fields(self):
        self.assertEqual(self.fields.name, "田中 健太")
        self.assertEqual(self.fields.furigana, "たなか けんた")
        self.assertEqual(self.fields.age, 34)
        self.assertEqual(self.fields.birth_date, "1990/04/15")
        self.assertEqual(self.fields.gender, "男")
        self.assertEqual(self.fields.address, "東京都港区芝公園1-2-3")

    def test_contact_fields(self):
        self.assertEqual(self.fields.phone, "090-1234-5678")
        self.assertEqual(self.fields.email, "kenta.tanaka@example.com")

    def test_sections_keep_paragraph_breaks(self):
        self.assertEqual(
            self.fields.recommendation_comment,
            "営業として8年間の実績があります。\n\n新規開拓を得意としています。",
        )
        self.assertEqual(len(self.fields.career_summary.splitlines()), 2)
        self.assertTrue(self.fields.career_summary.startswith("法人向けSaaS"))

    def test_chronology(self):
        self.assertEqual(len(self.fields.education_entries), 2)
        self.assertEqual(len(self.fields.career_entries), 2)
        self.assertEqual(self.fields.career_raw_lines, ["法人営業部にて新規開拓を担当"])
        self.assertEqual(self.fields.current_employer, "XYZ株式会社")
        self.assertEqual(self.fields.highest_education, "東京大学")

    def test_confidences(self):
        self.assertEqual(self.fields.field_confidences["name"], 100)
        self.assertEqual(self.fields.field_confidences["email"], 95)
        self.assertEqual(self.fields.field_confidences["address"], 80)
        self.assertEqual(self.fields.confidence, 100)


class FieldExtractorTests(unittest.TestCase):
    def test_empty_text(self):
        fields = extract_resume_fields("   \n")
        self.assertIsNone(fields.name)
        self.assertEqual(fields.confidence, 0)
        self.assertEqual(fields.field_confidences, {})

    def test_phone_shapes(self):
        self.assertEqual(extract_phone(["TEL 09012345678"]), "090-1234-5678")
        self.assertEqual(extract_phone(["連絡先 0312345678"]), "03-1234-5678")
        self.assertEqual(extract_phone(["電話　０９０－１２３４－５６７８"]), "090-1234-5678")
        self.assertEqual(extract_phone(["携帯 090 1234 5678"]), "090-1234-5678")
        self.assertEqual(extract_phone(["TEL 03 1234-5678"]), "03-1234-5678")
        self.assertIsNone(extract_phone(["受付番号 12345"]))

    def test_age_bounds(self):
        self.assertEqual(extract_age(["年齢：28"]), 28)
        self.assertIsNone(extract_age(["満12歳"]))

    def test_name_on_following_line(self):
        self.assertEqual(extract_name(["氏名", "山田 太郎"]), ("山田 太郎", None))

    def test_general_name_fallback(self):
        self.assertEqual(extract_name(["山田太郎"])[0], "山田 太郎")
        self.assertIsNone(extract_name(["推薦理由書"])[0])

    def test_email_without_split(self):
        self.assertEqual(extract_email(["E-mail: someone@example.jp"]), "someone@example.jp")
        self.assertIsNone(extract_email(["連絡先なし"]))

    def test_complete_address_is_not_joined_to_short_lines(self):
        lines = ["メール tanaka@example.co.jp", "自己PR", "IT"]
        self.assertEqual(extract_email(lines), "tanaka@example.co.jp")
        self.assertEqual(extract_email(["mail: sato@example.jp", "SE"]), "sato@example.jp")

    def test_split_address_is_repaired(self):
        self.assertEqual(extract_email(["sato@example.c", "om"]), "sato@example.com")
        self.assertEqual(extract_email(["sato@example", ".jp"]), "sato@example.jp")

    def test_section_header_remainder(self):
        text = "推薦理由：誠実な人柄です。\n面談所感\n特になし"
        self.assertEqual(extract_section(text, ("推薦理由",), ("面談所感",)), "誠実な人柄です。")
        self.assertIsNone(extract_section(text, ("職務要約",), ("■",)))


class ChronologyTests(unittest.TestCase):
    def test_date_shapes(self):
        self.assertEqual(
            parse_date_entry("2015/4 ABC株式会社 入社"),
            DateEntry(year=2015, month=4, content="ABC株式会社 入社"),
        )
        self.assertEqual(parse_date_entry("2018.10 入社").month, 10)
        self.assertEqual(parse_date_entry("2021 3 入社").year, 2021)
        self.assertIsNone(parse_date_entry("2021/13 入社"))
        self.assertIsNone(parse_date_entry("入社"))

    def test_date_only_line_takes_next_line(self):
        chronology = scan_chronology("職歴\n2015年4月\nABC株式会社 入社\n以上\n2019年1月 対象外")
        self.assertEqual(len(chronology.career_entries), 1)
        self.assertEqual(chronology.career_entries[0].content, "ABC株式会社 入社")
        self.assertEqual(chronology.education_entries, [])

    def test_current_employer_uses_latest_entry(self):
        entries = [
            DateEntry(year=2020, month=4, content="ABC株式会社入社"),
            DateEntry(year=2023, month=6, content="XYZ株式会社入社"),
        ]
        self.assertEqual(derive_current_employer(entries), "XYZ株式会社")
        self.assertIsNone(derive_current_employer([]))

    def test_highest_education_needs_graduation(self):
        entries = [
            DateEntry(year=2009, month=4, content="東京大学 入学"),
            DateEntry(year=2013, month=3, content="東京大学 卒業"),
        ]
        self.assertEqual(derive_highest_education(entries), "東京大学")
        self.assertIsNone(derive_highest_education(entries[:1]))


if __name__ == "__main__":
    unittest.main()
