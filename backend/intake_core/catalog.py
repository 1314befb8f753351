from __future__ import annotations

from collections.abc import Mapping, Sequence

GENERIC_SYMPTOMS: tuple[str, ...] = ("Fatigue", "Pain", "Discomfort", "Weakness")

DEFAULT_SYMPTOM_TABLE: dict[str, tuple[str, ...]] = {
    "Heart-related issue": ("Chest pain", "Shortness of breath", "Dizziness", "Sweating", "Nausea", "Arm pain"),
    "Anxiety/Panic Attack": (
        "Rapid heartbeat",
        "Shortness of breath",
        "Dizziness",
        "Sweating",
        "Trembling",
        "Chest tightness",
    ),
    "Respiratory Issue": ("Cough", "Wheezing", "Shortness of breath", "Chest tightness", "Fatigue"),
    "Cold/Flu": ("Fever", "Cough", "Sore throat", "Runny nose", "Body aches", "Fatigue", "Headache"),
    "COVID-19": ("Fever", "Dry cough", "Fatigue", "Loss of taste/smell", "Shortness of breath", "Body aches"),
    "Strep Throat": ("Sore throat", "Fever", "Swollen lymph nodes", "Difficulty swallowing", "Red tonsils"),
    "Food Poisoning": ("Nausea", "Vomiting", "Diarrhea", "Abdominal pain", "Fever", "Weakness"),
    "Stomach Flu": ("Nausea", "Vomiting", "Diarrhea", "Abdominal cramps", "Fever", "Dehydration"),
    "Migraine": ("Severe headache", "Nausea", "Light sensitivity", "Sound sensitivity", "Visual disturbances"),
    "Tension Headache": ("Dull headache", "Pressure around head", "Neck pain", "Shoulder tension"),
}


class SymptomCatalog:
    def __init__(
        self,
        table: Mapping[str, Sequence[str]] | None = None,
        fallback: Sequence[str] = GENERIC_SYMPTOMS,
    ) -> None:
        source = DEFAULT_SYMPTOM_TABLE if table is None else table
        self._table = {concern: tuple(symptoms) for concern, symptoms in source.items()}
        self._fallback = tuple(fallback)

    def symptoms_for(self, concern: str) -> tuple[str, ...]:
        return self._table.get(concern, self._fallback)

    def knows(self, concern: str) -> bool:
        return concern in self._table

    def list_concerns(self) -> list[str]:
        return list(self._table.keys())
