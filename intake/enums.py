"""
intake/enums.py

Synonym tables and the normalizer that maps free-text categorical values
onto canonical labels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class EnumSynonymMap:
    """
    Lower-cased synonym -> canonical label, plus the finite label set.
    """

    labels: tuple[str, ...]
    synonyms: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted({label for label in self.synonyms.values() if label not in self.labels})
        if unknown:
            raise ValueError(f"Synonyms point at labels outside the label set: {unknown}")


def title_case_words(value: str) -> str:
    """Capitalize each space-separated word, lower-casing the remainder."""

    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" ") if word)


class EnumNormalizer:
    """
    Canonicalizes one categorical attribute against its synonym map.
    """

    def __init__(self, synonym_map: EnumSynonymMap) -> None:
        self._labels = tuple(synonym_map.labels)
        self._synonyms = {
            key.strip().lower(): label for key, label in synonym_map.synonyms.items()
        }

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def normalize(self, raw: Any, fallback: str = "") -> str:
        """
        Map ``raw`` to a canonical label.

        Lookup order: synonym table on the trimmed lower-cased value, then
        title-cased membership, then membership of the trimmed value as given.
        Anything else yields ``fallback``; an empty fallback means the caller
        wants unmatched input left unnormalized.
        """

        if raw is None:
            return fallback
        text = str(raw).strip()
        if not text:
            return fallback

        mapped = self._synonyms.get(text.lower())
        if mapped:
            return mapped

        titled = title_case_words(text)
        if titled in self._labels:
            return titled

        if text in self._labels:
            return text

        return fallback

    def normalize_list(self, values: Iterable[Any] | str | None, fallback: str = "") -> list[str]:
        """
        Normalize element-wise, dropping misses and duplicates (first seen wins).
        When nothing survives and a fallback is given, the normalized fallback
        becomes the sole entry.
        """

        if values is None:
            items: list[Any] = []
        elif isinstance(values, str):
            items = values.split(",")
        else:
            items = list(values)

        normalized: list[str] = []
        for item in items:
            label = self.normalize(item, "")
            if label and label not in normalized:
                normalized.append(label)

        if not normalized and fallback:
            label = self.normalize(fallback, "")
            if label:
                normalized.append(label)

        return normalized


# ---------------------------------------------------------------------------
# Synonym tables
# ---------------------------------------------------------------------------

EQUINE_INTERVENTION_CATEGORY = "equine_intervention_category"
MOBILE_INTERVENTION_CATEGORY = "mobile_intervention_category"
REQUEST_SITUATION = "request_situation"
FOLLOW_UP_REQUIRED = "follow_up_required"
ADMINISTRATION_ROUTE = "administration_route"
VACCINE_CATEGORY = "vaccine_category"
HERD_HEALTH = "herd_health"
ANIMALS_HANDLING = "animals_handling"
LABOURS = "labours"
REACHABLE_LOCATION = "reachable_location"
INSECTICIDE_STATUS = "insecticide_status"
PARASITE_HERD_HEALTH = "parasite_herd_health"
COMPLIANCE = "complying_to_instructions"
SAMPLE_TYPE = "sample_type"
HORSE_GENDER = "horse_gender"
HORSE_HEALTH_STATUS = "horse_health_status"

DEFAULT_ENUM_MAPS: dict[str, EnumSynonymMap] = {
    EQUINE_INTERVENTION_CATEGORY: EnumSynonymMap(
        labels=(
            "Clinical Examination",
            "Surgical Operation",
            "Ultrasonography",
            "Lab Analysis",
            "Farriery",
        ),
        synonyms={
            "routine": "Clinical Examination",
            "regular": "Clinical Examination",
            "checkup": "Clinical Examination",
            "check-up": "Clinical Examination",
            "follow-up": "Clinical Examination",
            "followup": "Clinical Examination",
            "follow up": "Clinical Examination",
            "clinical examination": "Clinical Examination",
            "examination": "Clinical Examination",
            "exam": "Clinical Examination",
            "inspection": "Clinical Examination",
            "assessment": "Clinical Examination",
            "evaluation": "Clinical Examination",
            "breeding": "Clinical Examination",
            "فحص سريري": "Clinical Examination",
            "فحص": "Clinical Examination",
            "emergency": "Surgical Operation",
            "urgent": "Surgical Operation",
            "operation": "Surgical Operation",
            "surgery": "Surgical Operation",
            "surgical operation": "Surgical Operation",
            "surgical": "Surgical Operation",
            "procedure": "Surgical Operation",
            "عملية جراحية": "Surgical Operation",
            "جراحة": "Surgical Operation",
            "طوارئ": "Surgical Operation",
            "ultrasonography": "Ultrasonography",
            "ultrasound": "Ultrasonography",
            "sonography": "Ultrasonography",
            "imaging": "Ultrasonography",
            "scan": "Ultrasonography",
            "موجات فوق صوتية": "Ultrasonography",
            "lab analysis": "Lab Analysis",
            "laboratory analysis": "Lab Analysis",
            "laboratory": "Lab Analysis",
            "lab": "Lab Analysis",
            "analysis": "Lab Analysis",
            "diagnostic": "Lab Analysis",
            "preventive": "Lab Analysis",
            "prevention": "Lab Analysis",
            "screening": "Lab Analysis",
            "تحليل مخبري": "Lab Analysis",
            "farriery": "Farriery",
            "hoof care": "Farriery",
            "shoeing": "Farriery",
            "horseshoeing": "Farriery",
            "blacksmith": "Farriery",
            "حدادة": "Farriery",
        },
    ),
    MOBILE_INTERVENTION_CATEGORY: EnumSynonymMap(
        labels=("Emergency", "Routine", "Preventive", "Follow-up"),
        synonyms={
            "emergency": "Emergency",
            "urgent": "Emergency",
            "عاجل": "Emergency",
            "طوارئ": "Emergency",
            "routine": "Routine",
            "عادي": "Routine",
            "روتيني": "Routine",
            "preventive": "Preventive",
            "prevention": "Preventive",
            "وقائي": "Preventive",
            "follow-up": "Follow-up",
            "followup": "Follow-up",
            "follow up": "Follow-up",
            "follow": "Follow-up",
            "متابعة": "Follow-up",
        },
    ),
    REQUEST_SITUATION: EnumSynonymMap(
        labels=("Ongoing", "Closed", "Pending"),
        synonyms={
            "ongoing": "Ongoing",
            "open": "Ongoing",
            "active": "Ongoing",
            "in progress": "Ongoing",
            "مفتوح": "Ongoing",
            "نشط": "Ongoing",
            "جاري": "Ongoing",
            "closed": "Closed",
            "finished": "Closed",
            "done": "Closed",
            "completed": "Closed",
            "مغلق": "Closed",
            "منتهي": "Closed",
            "مكتمل": "Closed",
            "pending": "Pending",
            "waiting": "Pending",
            "في الانتظار": "Pending",
            "معلق": "Pending",
        },
    ),
    FOLLOW_UP_REQUIRED: EnumSynonymMap(
        labels=("Yes", "No"),
        synonyms={
            "true": "Yes",
            "yes": "Yes",
            "y": "Yes",
            "1": "Yes",
            "نعم": "Yes",
            "false": "No",
            "no": "No",
            "n": "No",
            "0": "No",
            "لا": "No",
        },
    ),
    ADMINISTRATION_ROUTE: EnumSynonymMap(
        labels=("Oral", "Injection", "Topical", "Intravenous", "Intramuscular", "Subcutaneous"),
        synonyms={
            "oral": "Oral",
            "po": "Oral",
            "mouth": "Oral",
            "فموي": "Oral",
            "عن طريق الفم": "Oral",
            "injection": "Injection",
            "inject": "Injection",
            "حقن": "Injection",
            "حقنة": "Injection",
            "topical": "Topical",
            "external": "Topical",
            "موضعي": "Topical",
            "iv": "Intravenous",
            "intravenous": "Intravenous",
            "وريدي": "Intravenous",
            "im": "Intramuscular",
            "intramuscular": "Intramuscular",
            "عضلي": "Intramuscular",
            "sc": "Subcutaneous",
            "subq": "Subcutaneous",
            "subcutaneous": "Subcutaneous",
            "تحت الجلد": "Subcutaneous",
        },
    ),
    VACCINE_CATEGORY: EnumSynonymMap(
        labels=("Preventive", "Emergency"),
        synonyms={
            "preventive": "Preventive",
            "prevention": "Preventive",
            "وقائي": "Preventive",
            "emergency": "Emergency",
            "urgent": "Emergency",
            "عاجل": "Emergency",
            "طارئ": "Emergency",
        },
    ),
    HERD_HEALTH: EnumSynonymMap(
        labels=("Healthy", "Sick", "Under Treatment"),
        synonyms={
            "healthy": "Healthy",
            "صحي": "Healthy",
            "سليم": "Healthy",
            "sick": "Sick",
            "sporadic": "Sick",
            "مريض": "Sick",
            "under treatment": "Under Treatment",
            "تحت العلاج": "Under Treatment",
        },
    ),
    ANIMALS_HANDLING: EnumSynonymMap(
        labels=("Easy", "Difficult"),
        synonyms={
            "easy": "Easy",
            "سهل": "Easy",
            "difficult": "Difficult",
            "hard": "Difficult",
            "صعب": "Difficult",
        },
    ),
    LABOURS: EnumSynonymMap(
        labels=("Available", "Not Available"),
        synonyms={
            "available": "Available",
            "avaialable": "Available",
            "متوفر": "Available",
            "not available": "Not Available",
            "unavailable": "Not Available",
            "غير متوفر": "Not Available",
        },
    ),
    REACHABLE_LOCATION: EnumSynonymMap(
        labels=("Easy", "Hard to reach"),
        synonyms={
            "easy": "Easy",
            "سهل": "Easy",
            "hard to reach": "Hard to reach",
            "difficult": "Hard to reach",
            "hard": "Hard to reach",
            "صعب الوصول": "Hard to reach",
        },
    ),
    INSECTICIDE_STATUS: EnumSynonymMap(
        labels=("Sprayed", "Not Sprayed"),
        synonyms={
            "sprayed": "Sprayed",
            "yes": "Sprayed",
            "مرشوش": "Sprayed",
            "نعم": "Sprayed",
            "not sprayed": "Not Sprayed",
            "not-sprayed": "Not Sprayed",
            "not_sprayed": "Not Sprayed",
            "no": "Not Sprayed",
            "غير مرشوش": "Not Sprayed",
            "لا": "Not Sprayed",
        },
    ),
    PARASITE_HERD_HEALTH: EnumSynonymMap(
        labels=("Healthy", "Sick", "Sporadic Cases"),
        synonyms={
            "healthy": "Healthy",
            "صحي": "Healthy",
            "سليم": "Healthy",
            "sick": "Sick",
            "مريض": "Sick",
            "under treatment": "Sick",
            "تحت العلاج": "Sick",
            "sporadic": "Sporadic Cases",
            "sporadic cases": "Sporadic Cases",
            "حالات متفرقة": "Sporadic Cases",
        },
    ),
    COMPLIANCE: EnumSynonymMap(
        labels=("Comply", "Not Comply", "Partially Comply"),
        synonyms={
            "comply": "Comply",
            "true": "Comply",
            "yes": "Comply",
            "ملتزم": "Comply",
            "نعم": "Comply",
            "not comply": "Not Comply",
            "false": "Not Comply",
            "no": "Not Comply",
            "غير ملتزم": "Not Comply",
            "لا": "Not Comply",
            "partially comply": "Partially Comply",
            "partial": "Partially Comply",
            "ملتزم جزئيا": "Partially Comply",
        },
    ),
    SAMPLE_TYPE: EnumSynonymMap(
        labels=("Blood", "Serum", "Feces", "Tissue", "Swab", "Milk", "Urine", "Other"),
        synonyms={
            "blood": "Blood",
            "whole blood": "Blood",
            "دم": "Blood",
            "serum": "Serum",
            "مصل": "Serum",
            "feces": "Feces",
            "fecal": "Feces",
            "stool": "Feces",
            "براز": "Feces",
            "tissue": "Tissue",
            "نسيج": "Tissue",
            "swab": "Swab",
            "مسحة": "Swab",
            "milk": "Milk",
            "حليب": "Milk",
            "urine": "Urine",
            "بول": "Urine",
            "other": "Other",
            "أخرى": "Other",
        },
    ),
    HORSE_GENDER: EnumSynonymMap(
        labels=("Male", "Female"),
        synonyms={
            "male": "Male",
            "m": "Male",
            "stallion": "Male",
            "gelding": "Male",
            "ذكر": "Male",
            "female": "Female",
            "f": "Female",
            "mare": "Female",
            "أنثى": "Female",
        },
    ),
    HORSE_HEALTH_STATUS: EnumSynonymMap(
        labels=("Healthy", "Sick", "Injured"),
        synonyms={
            "healthy": "Healthy",
            "سليم": "Healthy",
            "صحي": "Healthy",
            "sick": "Sick",
            "مريض": "Sick",
            "injured": "Injured",
            "مصاب": "Injured",
        },
    ),
}


def build_enum_normalizers(
    maps: Mapping[str, EnumSynonymMap] | None = None,
) -> dict[str, EnumNormalizer]:
    """
    One normalizer per synonym table; ``maps`` entries override the defaults.
    """

    merged = dict(DEFAULT_ENUM_MAPS)
    if maps:
        merged.update(maps)
    return {name: EnumNormalizer(synonym_map) for name, synonym_map in merged.items()}
