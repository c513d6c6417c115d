import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from job_referral.mapping.field_mapper import map_fields, resolve_required_fields  # noqa: E402
from job_referral.schemas import ExtractionResult, FormField, ResumeFields  # noqa: E402


def make_resume(**overrides) -> ResumeFields:
    values = {
        "name": "田中 健太",
        "furigana": "たなか けんた",
        "career_summary": "法人営業に10年従事。",
        "field_confidences": {"name": 100, "furigana": 100, "career_summary": 85},
        "confidence": 100,
    }
    values.update(overrides)
    return ResumeFields(**values)


def make_extraction(**overrides) -> ExtractionResult:
    values = {
        "success": True,
        "extracted_title": "法人営業",
        "confidence": 95,
        "method": "memo_pattern",
    }
    values.update(overrides)
    return ExtractionResult(**values)


def by_name(result):
    return {mapping.field_name: mapping for mapping in result.field_mappings}


class MapFieldsTests(unittest.TestCase):
    def test_sources_for_a_complete_form(self):
        fields = [
            FormField(name="個人情報の取り扱いへの同意", type="checkbox", required=True),
            FormField(name="氏名", required=True),
            FormField(name="フリガナ", required=True),
            FormField(name="経歴", type="textarea", required=True),
            FormField(name="希望年収", required=True),
            FormField(name="その他条件", type="textarea", required=True),
        ]
        extraction = make_extraction(trailing_notes="希望年収：700万円（仮）")
        result = map_fields(fields, make_resume(), extraction)

        self.assertTrue(result.success)
        mapped = by_name(result)
        self.assertEqual(mapped["個人情報の取り扱いへの同意"].value, "同意する")
        self.assertEqual(mapped["個人情報の取り扱いへの同意"].source, "auto-consent")
        self.assertEqual(mapped["氏名"].value, "田中 健太")
        self.assertEqual(mapped["氏名"].confidence, 100)
        self.assertEqual(mapped["フリガナ"].value, "たなか けんた")
        self.assertEqual(mapped["経歴"].source, "resume")
        self.assertEqual(mapped["経歴"].confidence, 85)
        self.assertEqual(mapped["希望年収"].value, "700万円")
        self.assertEqual(mapped["希望年収"].source, "memo")
        self.assertEqual(mapped["希望年収"].confidence, 95)
        self.assertEqual(mapped["その他条件"].value, "希望年収700万円（仮）")
        self.assertEqual(mapped["その他条件"].source, "inferred")
        self.assertEqual(mapped["その他条件"].confidence, 90)

    def test_career_summary_only_fills_the_exact_field(self):
        fields = [FormField(name="経歴書", type="file")]
        result = map_fields(fields, make_resume(), make_extraction())
        self.assertTrue(result.success)
        self.assertEqual(result.field_mappings, [])
        self.assertEqual(result.attempted_mappings[0].source, "unmapped")

    def test_unmapped_required_field_fails_everything(self):
        fields = [FormField(name="氏名", required=True), FormField(name="趣味", required=True)]
        result = map_fields(fields, make_resume(), make_extraction())
        self.assertFalse(result.success)
        self.assertEqual(result.field_mappings, [])
        self.assertEqual(result.unmapped_required_fields, ["趣味"])
        self.assertEqual(len(result.attempted_mappings), 2)
        self.assertIn("趣味", result.errors[0])

    def test_fuzzy_auto_consent(self):
        fields = [FormField(name="応募意思の確認", required=True)]
        extraction = make_extraction(auto_consent_fields={"応募意思": "はい"})
        result = map_fields(fields, make_resume(), extraction)
        self.assertTrue(result.success)
        self.assertEqual(result.field_mappings[0].value, "はい")
        self.assertEqual(result.field_mappings[0].confidence, 100)

    def test_memo_fallbacks(self):
        fields = [
            FormField(name="現所属", required=True),
            FormField(name="推薦コメント", type="textarea", required=True),
        ]
        extraction = make_extraction(
            memo="W送付 法人営業 ※ 推薦理由：真面目な方です",
            trailing_notes="現職は株式会社ABCです。",
        )
        result = map_fields(fields, make_resume(), extraction)
        self.assertTrue(result.success)
        mapped = by_name(result)
        self.assertEqual(mapped["現所属"].value, "株式会社ABC")
        self.assertEqual(mapped["現所属"].source, "memo")
        self.assertEqual(mapped["推薦コメント"].value, "真面目な方です")
        self.assertEqual(mapped["推薦コメント"].confidence, 80)

    def test_resume_comment_wins_over_memo(self):
        fields = [FormField(name="推薦コメント", required=True)]
        resume = make_resume(
            recommendation_comment="実績豊富です。",
            field_confidences={"recommendation_comment": 90},
        )
        extraction = make_extraction(memo="推薦理由：真面目な方です")
        result = map_fields(fields, resume, extraction)
        self.assertEqual(result.field_mappings[0].value, "実績豊富です。")
        self.assertEqual(result.field_mappings[0].source, "resume")
        self.assertEqual(result.field_mappings[0].confidence, 90)

    def test_extra_required_field_promotes_optional_form_field(self):
        fields = [FormField(name="希望年収")]
        extraction = make_extraction(extra_required_fields=["希望年収"])
        result = map_fields(fields, make_resume(), extraction)
        self.assertFalse(result.success)
        self.assertEqual(result.unmapped_required_fields, ["希望年収"])


class RequiredFieldTests(unittest.TestCase):
    def test_extras_match_by_containment(self):
        fields = [FormField(name="氏名", required=True), FormField(name="現年収（万円）")]
        required, warnings = resolve_required_fields(fields, ["現年収", "ポートフォリオURL", " "])
        self.assertEqual(required, ["氏名", "現年収（万円）"])
        self.assertEqual(
            warnings,
            ["Extra required field 'ポートフォリオURL' is not present on the portal form."],
        )

    def test_desired_salary_does_not_require_minimum_salary(self):
        fields = [FormField(name="希望年収"), FormField(name="最低希望年収")]
        required, warnings = resolve_required_fields(fields, ["希望年収"])
        self.assertEqual(required, ["希望年収"])
        self.assertEqual(warnings, [])

        labelled = [FormField(name="希望年収（万円）"), FormField(name="最低希望年収（万円）")]
        required, _ = resolve_required_fields(labelled, ["希望年収"])
        self.assertEqual(required, ["希望年収（万円）"])

    def test_containment_matching_several_fields_is_not_guessed(self):
        fields = [FormField(name="備考（社内）"), FormField(name="備考（候補者）")]
        required, warnings = resolve_required_fields(fields, ["備考"])
        self.assertEqual(required, [])
        self.assertIn("matches several form fields", warnings[0])

    def test_desired_salary_memo_maps_with_minimum_field_on_form(self):
        fields = [FormField(name="希望年収"), FormField(name="最低希望年収")]
        extraction = make_extraction(
            trailing_notes="希望年収：700万円",
            extra_required_fields=["希望年収"],
        )
        result = map_fields(fields, make_resume(), extraction)
        self.assertTrue(result.success)
        self.assertEqual([mapping.field_name for mapping in result.field_mappings], ["希望年収"])


if __name__ == "__main__":
    unittest.main()
