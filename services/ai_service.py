"""
AI Prescription Draft Generator

Uses OpenAI (or any chat-completions LLM) to draft a prescription from
symptoms plus the patient's record and prescribing history.

The draft is never saved here; the doctor reviews it in the form first.
Allergies are only passed to the model as an instruction to avoid them.
Nothing in this module checks the model's output against them, so
find_allergy_conflicts() exists for the UI to flag obvious name matches.
"""

import json
import re
from dataclasses import dataclass, field

import openai
from openai import OpenAI

from core.config import get_settings
from core.errors import AIServiceError, ValidationError
from core.logging import get_logger
from models.prescription import DEFAULT_FOLLOW_UP_DAYS

logger = get_logger("ai_service")

FALLBACK_ADVICE = "AI prescription generation failed. Please create prescription manually."

# Callers pass up to HISTORY_WINDOW previous prescriptions; the prompt uses the newest few
HISTORY_WINDOW = 5
PROMPT_HISTORY_LIMIT = 3

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_p": 0.95,
    "max_tokens": 2048,
}

MEDICINE_KEYS = ("medicine", "dosage", "frequency", "duration", "timing")

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL | re.IGNORECASE)


@dataclass
class PrescriptionDraft:
    diagnosis: str = ""
    medicines: list = field(default_factory=list)
    advice: str = ""
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS
    degraded: bool = False

    @classmethod
    def fallback(cls) -> "PrescriptionDraft":
        return cls(advice=FALLBACK_ADVICE, degraded=True)


@dataclass
class DraftContext:
    symptoms: str
    patient: object
    diagnosis: str | None = None
    previous_prescriptions: list = field(default_factory=list)


class DraftFormatError(ValueError):
    """The model answered, but not with the JSON object we asked for."""


# ------------------------------------------
# Prompt
# ------------------------------------------
def build_prescription_prompt(symptoms: str, diagnosis: str | None, patient, previous_prescriptions: list) -> str:
    allergies = list(getattr(patient, "allergy_list", None) or getattr(patient, "allergies", None) or [])
    conditions = list(getattr(patient, "condition_list", None) or getattr(patient, "chronic_conditions", None) or [])

    patient_lines = [
        f"- Name: {patient.name}",
        f"- Age: {patient.age} years",
        f"- Gender: {patient.gender}",
        f"- Blood Group: {patient.blood_group or 'Not specified'}",
    ]
    if patient.weight:
        patient_lines.append(f"- Weight: {patient.weight} kg")
    if patient.height:
        patient_lines.append(f"- Height: {patient.height} cm")

    history_lines = [
        f"- Allergies: {', '.join(allergies)} ⚠️ AVOID THESE" if allergies else "- No known allergies",
        f"- Chronic Conditions: {', '.join(conditions)}" if conditions else "- No chronic conditions",
    ]

    sections = [
        "You are an experienced medical doctor. Generate a detailed prescription based on the following information:",
        "**PATIENT INFORMATION:**\n" + "\n".join(patient_lines),
        "**MEDICAL HISTORY:**\n" + "\n".join(history_lines),
        f"**CURRENT SYMPTOMS:**\n{symptoms.strip()}",
    ]
    if diagnosis and diagnosis.strip():
        sections.append(f"**DIAGNOSIS:** {diagnosis.strip()}")

    if previous_prescriptions:
        entries = []
        for i, p in enumerate(previous_prescriptions[:PROMPT_HISTORY_LIMIT], start=1):
            meds = ", ".join(
                f"{m.get('medicine', '')} {m.get('dosage', '')} {m.get('frequency', '')}".strip()
                for m in (p.medicines or []) if isinstance(m, dict)
            )
            entries.append(f"{i}. Diagnosis: {p.diagnosis}\n   Medicines: {meds}")
        sections.append("**PREVIOUS PRESCRIPTIONS (Learn from doctor's patterns):**\n" + "\n".join(entries))

    sections.append(
        """**INSTRUCTIONS:**
1. Provide a clear diagnosis if not already specified
2. Recommend appropriate medicines with:
   - Medicine name (prefer Indian brands like Dolo, Crocin, Azithral, etc.)
   - Dosage (e.g., 650mg, 500mg)
   - Frequency (OD/BD/TDS/QID)
   - Duration (in days)
   - Timing (Before Food/After Food/Empty Stomach/With Food)
3. Consider patient's age, weight, allergies, and chronic conditions
4. Provide lifestyle advice and precautions
5. Suggest follow-up duration in days

**IMPORTANT SAFETY RULES:**
- NEVER prescribe medicines the patient is allergic to
- Adjust dosages for age and weight
- Consider drug interactions with chronic conditions
- Follow Indian medical guidelines

**OUTPUT FORMAT (JSON):**
{
  "diagnosis": "Clear diagnosis here",
  "medicines": [
    {
      "medicine": "Medicine Brand Name",
      "dosage": "650mg",
      "frequency": "BD",
      "duration": "5",
      "timing": "After Food"
    }
  ],
  "advice": "Detailed advice including diet, rest, precautions, warning signs",
  "followUpDays": 7
}

Provide ONLY the JSON output, no additional text."""
    )
    return "\n\n".join(sections)


# ------------------------------------------
# Response parsing
# ------------------------------------------
def strip_code_fence(text: str) -> str:
    text = (text or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _clean_medicine(item) -> dict:
    if not isinstance(item, dict):
        raise DraftFormatError(f"medicine entry is not an object: {item!r}")
    return {key: str(item.get(key) if item.get(key) is not None else "").strip() for key in MEDICINE_KEYS}


def _follow_up_days(value) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_FOLLOW_UP_DAYS
    return days if days > 0 else DEFAULT_FOLLOW_UP_DAYS


def parse_ai_response(ai_response: str) -> PrescriptionDraft:
    """Turn the model's text reply into a draft. Never raises.

    Missing keys fall back to defaults; anything that isn't a JSON object of
    the expected shape gives the degraded draft.
    """
    try:
        parsed = json.loads(strip_code_fence(ai_response))
        if not isinstance(parsed, dict):
            raise DraftFormatError("reply is not a JSON object")

        medicines = parsed.get("medicines") or []
        if not isinstance(medicines, list):
            raise DraftFormatError("medicines is not a list")

        return PrescriptionDraft(
            diagnosis=str(parsed.get("diagnosis") or "").strip(),
            medicines=[_clean_medicine(m) for m in medicines],
            advice=str(parsed.get("advice") or "").strip(),
            follow_up_days=_follow_up_days(parsed.get("followUpDays")),
        )
    # ValueError covers JSONDecodeError and DraftFormatError
    except (ValueError, TypeError, OverflowError, RecursionError) as exc:
        logger.warning("Could not parse AI prescription: %s", exc)
        logger.debug("Raw AI response: %r", ai_response)
        return PrescriptionDraft.fallback()


def find_allergy_conflicts(draft: PrescriptionDraft, allergies: list[str]) -> list[str]:
    """Names of drafted medicines that mention a recorded allergy (plain substring check)."""
    allergies = [a.strip().lower() for a in allergies or [] if a and a.strip()]
    conflicts = []
    for m in draft.medicines:
        name = (m.get("medicine") or "").lower()
        if name and any(a in name or name in a for a in allergies):
            conflicts.append(m.get("medicine"))
    return conflicts


# ------------------------------------------
# Generator
# ------------------------------------------
def get_openai_client() -> OpenAI:
    settings = get_settings()
    if not settings.openai_api_key:
        raise AIServiceError("OPENAI_API_KEY is not configured.")
    return OpenAI(api_key=settings.openai_api_key, timeout=settings.ai_timeout_seconds)


class PrescriptionDraftGenerator:
    """Drafts prescriptions through a chat-completions client.

    Swap the client (or subclass and override _complete) to use another vendor.
    """

    def __init__(self, client=None, model: str | None = None):
        self._client = client
        self.model = model or get_settings().openai_model

    @property
    def client(self):
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def _complete(self, prompt: str, **config) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **config,
            )
        except openai.OpenAIError as exc:
            logger.error("AI request failed: %s", exc)
            raise AIServiceError(f"AI service request failed: {exc}") from exc

        if not completion or not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def generate_draft(self, context: DraftContext) -> PrescriptionDraft:
        if not (context.symptoms or "").strip():
            raise ValidationError("Please enter symptoms")

        prompt = build_prescription_prompt(
            context.symptoms,
            context.diagnosis,
            context.patient,
            list(context.previous_prescriptions or [])[:HISTORY_WINDOW],
        )
        reply = self._complete(prompt, **GENERATION_CONFIG)
        draft = parse_ai_response(reply)
        logger.info(
            "AI draft for patient %s: %d medicine(s)%s",
            getattr(context.patient, "patient_id", "?"),
            len(draft.medicines),
            " (degraded)" if draft.degraded else "",
        )
        return draft

    def suggest_medicines(self, symptoms: str) -> list[str]:
        """Up to five brand names for the symptoms; [] on any failure."""
        prompt = (
            f'Based on these symptoms: "{symptoms}", suggest 5 commonly prescribed Indian medicines '
            "(brand names only). Return as JSON array of strings."
        )
        try:
            reply = self._complete(prompt, temperature=0.5, max_tokens=256)
            names = json.loads(strip_code_fence(reply))
        except (AIServiceError, ValueError, RecursionError) as exc:
            logger.warning("Medicine suggestions unavailable: %s", exc)
            return []
        if not isinstance(names, list):
            return []
        return [str(n).strip() for n in names if str(n).strip()][:5]


def generate_prescription(
    symptoms: str,
    patient,
    diagnosis: str | None = None,
    previous_prescriptions: list | None = None,
    generator: PrescriptionDraftGenerator | None = None,
) -> PrescriptionDraft:
    """Draft a prescription for review. Transport failures raise AIServiceError."""
    generator = generator or PrescriptionDraftGenerator()
    context = DraftContext(
        symptoms=symptoms,
        patient=patient,
        diagnosis=diagnosis,
        previous_prescriptions=previous_prescriptions or [],
    )
    return generator.generate_draft(context)
