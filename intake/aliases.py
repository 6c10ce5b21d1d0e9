"""
intake/aliases.py

Column-name alias tables for field-visit imports.

Each canonical attribute maps to an ordered tuple of source column names.
Order is priority: the first alias carrying a non-empty value wins, and the
first alias doubles as the preferred header in CSV templates and exports.
Tables are plain data; components receive them at construction and keep
their own copies.
"""

from __future__ import annotations

from typing import Mapping

FieldAliasSet = tuple[str, ...]

SPECIES: tuple[str, ...] = ("sheep", "goats", "camel", "cattle", "horse")


# ---------------------------------------------------------------------------
# Client / owner
# ---------------------------------------------------------------------------

CLIENT_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "client_name": (
        "Name", "name", "clientName", "Client Name", "client",
        "owner", "Owner", "farmer", "Farmer",
        "الاسم", "اسم العميل", "اسم المربي", "المالك", "العميل",
    ),
    "client_national_id": (
        "ID", "id", "clientId", "Client ID", "nationalId", "National ID",
        "clientNationalId", "ownerId", "Owner ID", "identity", "Identity",
        "رقم الهوية", "الهوية", "هوية",
    ),
    "client_phone": (
        "Phone", "phone", "clientPhone", "Client Phone", "Mobile", "mobile",
        "phoneNumber", "Phone Number", "tel", "Tel", "telephone", "Telephone",
        "رقم الهاتف", "الهاتف", "جوال", "موبايل",
    ),
    "client_village": (
        "Village", "village", "clientVillage",
        "Location", "location", "Farm Location", "farmLocation",
        "القرية", "الموقع", "موقع المزرعة",
    ),
    "client_address": (
        "Address", "address", "Detailed Address", "detailedAddress", "clientAddress",
        "العنوان", "العنوان التفصيلي",
    ),
    "client_birth_date": (
        "Birth Date", "birthDate", "Date of Birth", "dateOfBirth",
        "clientBirthDate", "Client Birth Date",
        "تاريخ الميلاد",
    ),
}


# ---------------------------------------------------------------------------
# Shared visit attributes
# ---------------------------------------------------------------------------

SHARED_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "serial_no": (
        "Serial No", "serialNo", "serial_no", "Serial Number",
        "الرقم التسلسلي", "رقم تسلسلي",
    ),
    "date": ("Date", "date", "DATE", "التاريخ", "تاريخ"),
    "farm_location": (
        "Location", "location", "Farm Location", "farmLocation", "farm_location",
        "الموقع", "موقع المزرعة",
    ),
    "supervisor": ("Supervisor", "supervisor", "المشرف"),
    "vehicle_no": ("Vehicle No.", "Vehicle No", "vehicleNo", "vehicle_no", "رقم المركبة"),
    "holding_code": (
        "Holding Code", "holdingCode", "holding_code",
        "رمز الحيازة", "الرمز",
    ),
    "latitude": ("N", "N Coordinate", "latitude", "lat", "Latitude", "خط العرض"),
    "longitude": ("E", "E Coordinate", "longitude", "lng", "long", "Longitude", "خط الطول"),
    "request_date": ("Request Date", "requestDate", "request_date", "تاريخ الطلب"),
    "request_situation": (
        "Request Situation", "Request Status", "requestSituation", "requestStatus",
        "situation", "حالة الطلب",
    ),
    "request_fulfilling_date": (
        "Request Fulfilling Date", "requestFulfillingDate", "request_fulfilling_date",
        "Fulfilling Date", "تاريخ تنفيذ الطلب",
    ),
    "remarks": ("Remarks", "remarks", "ملاحظات"),
}

_CLINICAL_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "diagnosis": ("Diagnosis", "diagnosis", "التشخيص"),
    "intervention_category": (
        "Intervention Category", "interventionCategory", "intervention_category",
        "فئة التدخل",
    ),
    "treatment": ("Treatment", "treatment", "العلاج"),
    "medications_used": (
        "Medications Used", "medicationsUsed", "medications_used", "الأدوية المستخدمة",
    ),
    "administration_route": (
        "Administration Route", "administrationRoute", "route", "طريقة الإعطاء",
    ),
    "follow_up_required": (
        "Follow Up Required", "followUpRequired", "follow_up_required", "مطلوب متابعة",
    ),
    "follow_up_date": ("Follow Up Date", "followUpDate", "follow_up_date", "تاريخ المتابعة"),
}


# ---------------------------------------------------------------------------
# Species counts
# ---------------------------------------------------------------------------

# species -> (name, plural, female label, arabic names, young, female, vaccinated, treated)
_SPECIES_LABELS: dict[str, tuple[str, str, str, tuple[str, ...], str, str, str, str]] = {
    "sheep": (
        "Sheep", "Sheep", "F. Sheep", ("الأغنام", "أغنام"),
        "صغار الأغنام", "إناث الأغنام", "الأغنام المحصنة", "الأغنام المعالجة",
    ),
    "goats": (
        "Goats", "Goats", "F. Goats", ("الماعز", "ماعز"),
        "صغار الماعز", "إناث الماعز", "الماعز المحصن", "الماعز المعالج",
    ),
    "camel": (
        "Camel", "Camels", "F. Camel", ("الإبل", "إبل", "الجمال"),
        "صغار الإبل", "إناث الإبل", "الإبل المحصنة", "الإبل المعالجة",
    ),
    "cattle": (
        "Cattle", "Cattle", "F. Cattle", ("الأبقار", "أبقار", "البقر"),
        "صغار الأبقار", "إناث الأبقار", "الأبقار المحصنة", "الأبقار المعالجة",
    ),
    "horse": (
        "Horse", "Horses", "Female Horses", ("الخيول", "خيول", "الأحصنة"),
        "صغار الخيول", "إناث الخيول", "الخيول المحصنة", "الخيول المعالجة",
    ),
}


def _herd_count_aliases(*, outcome: str) -> dict[str, FieldAliasSet]:
    """Per-species total/young/female/<outcome> aliases for herd-count sheets."""

    treated = outcome == "treated"
    aliases: dict[str, FieldAliasSet] = {}
    for species, labels in _SPECIES_LABELS.items():
        name, plural, female_label, arabic, ar_young, ar_female, ar_vaccinated, ar_treated = labels
        total_label = f"Total {name}" if treated and species != "horse" else name
        if treated:
            female_label = f"Female {plural}"
        aliases[f"{species}_total"] = (total_label, species, f"{species}Total", *arabic)
        aliases[f"{species}_young"] = (
            f"Young {plural}", f"{species}Young", f"young_{species}", ar_young,
        )
        aliases[f"{species}_female"] = (
            female_label, f"{species}Female", f"female_{species}",
            f"f{species.capitalize()}", ar_female,
        )
        aliases[f"{species}_{outcome}"] = (
            f"{outcome.capitalize()} {plural}",
            f"{species}{outcome.capitalize()}",
            f"{outcome}{species.capitalize()}",
            ar_treated if treated else ar_vaccinated,
        )
    return aliases


def _head_count_aliases() -> dict[str, FieldAliasSet]:
    return {
        f"{species}_count": (labels[0], species, f"{species}Count", *labels[3])
        for species, labels in _SPECIES_LABELS.items()
    }


# ---------------------------------------------------------------------------
# Per-domain tables
# ---------------------------------------------------------------------------

VACCINATION_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "team": ("Team", "team", "الفريق"),
    "vaccine_type": (
        "Vaccine", "vaccineType", "vaccine_type", "Vaccine Type", "vaccine",
        "نوع اللقاح", "اللقاح",
    ),
    "vaccine_category": (
        "Category", "vaccineCategory", "vaccine_category", "category", "فئة اللقاح",
    ),
    "herd_health": ("Herd Health", "herdHealth", "herd_health", "صحة القطيع"),
    "animals_handling": (
        "Animals Handling", "animalsHandling", "animals_handling", "التعامل مع الحيوانات",
    ),
    "labours": ("Labours", "labours", "العمالة"),
    "reachable_location": (
        "Reachable Location", "reachableLocation", "reachable_location", "سهولة الوصول",
    ),
    **_herd_count_aliases(outcome="vaccinated"),
}

PARASITE_CONTROL_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "herd_location": (
        "Herd Location", "herdLocation", "Location", "location",
        "موقع القطيع", "الموقع",
    ),
    "insecticide_type": (
        "Insecticide Used", "Insecticide", "insecticideType", "insecticide_type",
        "نوع المبيد", "المبيد المستخدم",
    ),
    "insecticide_method": (
        "Type", "Method", "insecticideMethod", "insecticide_method",
        "طريقة الرش", "النوع",
    ),
    "insecticide_volume": (
        "Volume (ml)", "Volume", "insecticideVolume", "insecticide_volume",
        "الحجم (مل)", "الحجم",
    ),
    "insecticide_status": (
        "Status", "Spray Status", "insecticideStatus", "insecticide_status", "حالة الرش",
    ),
    "insecticide_category": (
        "Category", "insecticideCategory", "insecticide_category", "فئة المبيد",
    ),
    "animal_barn_size": (
        "Size (sqM)", "Barn Size", "animalBarnSize", "animal_barn_size",
        "مساحة الحظيرة", "الحجم (متر مربع)",
    ),
    "breeding_sites": ("Breeding Sites", "breedingSites", "breeding_sites", "مواقع التكاثر"),
    "parasite_control_volume": (
        "Parasite Control Volume", "parasiteControlVolume", "parasite_control_volume",
        "حجم مكافحة الطفيليات",
    ),
    "parasite_control_status": (
        "Parasite Control Status", "parasiteControlStatus", "parasite_control_status",
        "حالة مكافحة الطفيليات",
    ),
    "herd_health_status": (
        "Herd Health Status", "herdHealthStatus", "herd_health_status", "حالة صحة القطيع",
    ),
    "complying_to_instructions": (
        "Complying to instructions", "complyingToInstructions",
        "complying_to_instructions", "ownerCompliance", "الالتزام بالتعليمات",
    ),
    **_herd_count_aliases(outcome="treated"),
}

MOBILE_CLINIC_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    **_CLINICAL_FIELD_ALIASES,
    **_head_count_aliases(),
}

EQUINE_HEALTH_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    **_CLINICAL_FIELD_ALIASES,
    "horse_count": ("Horse Count", "horseCount", "horse_count", "عدد الخيول", "عدد الأحصنة"),
    "horse_breed": ("Breed", "breed", "horseBreed", "السلالة"),
    "horse_age": ("Age", "age", "horseAge", "العمر"),
    "horse_gender": ("Gender", "gender", "horseGender", "الجنس"),
    "horse_color": ("Color", "Colour", "color", "horseColor", "اللون"),
    "horse_health_status": (
        "Health Status", "healthStatus", "horseHealthStatus", "الحالة الصحية",
    ),
}

LABORATORY_FIELD_ALIASES: dict[str, FieldAliasSet] = {
    "sample_code": ("Sample Code", "sampleCode", "code", "sample_code", "رمز العينة"),
    "collector": (
        "Sample Collector", "collector", "Collector", "sample_collector",
        "جامع العينة", "المجمع",
    ),
    "sample_type": ("Sample Type", "sampleType", "Type", "sample_type", "نوع العينة", "نوع"),
    "sample_number": (
        "Samples Number", "sampleNumber", "Sample Number", "sample_number",
        "رقم العينة", "عدد العينات",
    ),
    "positive_cases": (
        "Positive Cases", "positiveCases", "positive_cases", "positive cases",
        "الحالات الإيجابية", "إيجابي",
    ),
    "negative_cases": (
        "Negative Cases", "negativeCases", "negative_cases", "negative cases",
        "الحالات السلبية", "سلبي",
    ),
    "test_results": (
        "Test Results", "testResults", "test_results", "results",
        "النتائج", "نتائج الفحص",
    ),
    "other_species": (
        "Other (Species)", "Other", "other", "otherSpecies", "أخرى", "أنواع أخرى",
    ),
    **_head_count_aliases(),
}


def build_alias_table(*tables: Mapping[str, FieldAliasSet]) -> dict[str, FieldAliasSet]:
    """
    Merge alias tables left to right into an independent copy.
    Later tables override earlier entries for the same canonical attribute.
    """

    merged: dict[str, FieldAliasSet] = {}
    for table in tables:
        for attribute, aliases in table.items():
            merged[attribute] = tuple(aliases)
    return merged


def preferred_header(aliases: Mapping[str, FieldAliasSet], attribute: str) -> str:
    """Return the first (preferred) alias of an attribute, or the attribute itself."""

    candidates = aliases.get(attribute) or ()
    return candidates[0] if candidates else attribute
