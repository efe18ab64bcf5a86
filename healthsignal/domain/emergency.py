"""
Emergency keyword table and localized emergency advisories.

Both tables are immutable and built once per process (see the cached
``default_*`` factories). The classifier receives them explicitly, so tests
can inject smaller tables without touching module state.
"""

from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class KeywordCategory(str, Enum):
    """Clinical grouping of emergency phrases."""

    CARDIAC = "cardiac"
    RESPIRATORY = "respiratory"
    NEUROLOGICAL = "neurological"
    TRAUMA = "trauma"
    PSYCHIATRIC = "psychiatric"
    OTHER = "other"


class EmergencyKeyword(BaseModel):
    """A trigger phrase. Matching is case-insensitive substring containment."""

    model_config = ConfigDict(frozen=True)

    phrase: str = Field(min_length=1)
    category: KeywordCategory

    @property
    def needle(self) -> str:
        return self.phrase.lower()


class EmergencyKeywordTable(BaseModel):
    """Ordered, duplicate-free set of emergency phrases."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[EmergencyKeyword, ...] = Field(min_length=1)

    @field_validator("keywords")
    def phrases_are_unique(cls, v: tuple[EmergencyKeyword, ...]) -> tuple[EmergencyKeyword, ...]:
        seen: set[str] = set()
        for keyword in v:
            if keyword.needle in seen:
                raise ValueError(f"Duplicate emergency phrase: {keyword.phrase!r}")
            seen.add(keyword.needle)
        return v

    def __len__(self) -> int:
        return len(self.keywords)

    def in_category(self, category: KeywordCategory) -> list[str]:
        return [k.phrase for k in self.keywords if k.category == category]


class LocalizedAdvisory(BaseModel):
    """Canned emergency message per language code, with a default fallback."""

    model_config = ConfigDict(frozen=True)

    messages: Mapping[str, str]
    default_language: str = "en"

    @field_validator("messages")
    def freeze_messages(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        if not v:
            raise ValueError("At least one advisory message is required")
        return MappingProxyType({code.lower(): text for code, text in v.items()})

    @model_validator(mode="after")
    def default_is_present(self) -> "LocalizedAdvisory":
        if self.default_language not in self.messages:
            raise ValueError(f"No advisory message for default language {self.default_language!r}")
        return self

    @property
    def languages(self) -> tuple[str, ...]:
        return tuple(self.messages)

    def resolve_language(self, language_code: object) -> str:
        """Map a caller-supplied code (``hi``, ``HI``, ``hi-IN``) to a supported one."""
        if not isinstance(language_code, str):
            return self.default_language
        code = language_code.strip().lower().replace("_", "-")
        if code in self.messages:
            return code
        primary = code.split("-", 1)[0]
        return primary if primary in self.messages else self.default_language

    def message_for(self, language_code: object) -> str:
        return self.messages[self.resolve_language(language_code)]


EMERGENCY_HOTLINE = "108"

_KEYWORDS: tuple[tuple[str, KeywordCategory], ...] = (
    ("chest pain", KeywordCategory.CARDIAC),
    ("heart attack", KeywordCategory.CARDIAC),
    ("cardiac arrest", KeywordCategory.CARDIAC),
    ("severe chest pressure", KeywordCategory.CARDIAC),
    ("difficulty breathing", KeywordCategory.RESPIRATORY),
    ("can't breathe", KeywordCategory.RESPIRATORY),
    ("cannot breathe", KeywordCategory.RESPIRATORY),
    ("choking", KeywordCategory.RESPIRATORY),
    ("severe breathlessness", KeywordCategory.RESPIRATORY),
    ("gasping for air", KeywordCategory.RESPIRATORY),
    ("stroke", KeywordCategory.NEUROLOGICAL),
    ("paralysis", KeywordCategory.NEUROLOGICAL),
    ("sudden weakness", KeywordCategory.NEUROLOGICAL),
    ("facial drooping", KeywordCategory.NEUROLOGICAL),
    ("slurred speech", KeywordCategory.NEUROLOGICAL),
    ("severe headache", KeywordCategory.NEUROLOGICAL),
    ("loss of consciousness", KeywordCategory.NEUROLOGICAL),
    ("unconscious", KeywordCategory.NEUROLOGICAL),
    ("seizure", KeywordCategory.NEUROLOGICAL),
    ("convulsion", KeywordCategory.NEUROLOGICAL),
    ("severe bleeding", KeywordCategory.TRAUMA),
    ("heavy bleeding", KeywordCategory.TRAUMA),
    ("profuse bleeding", KeywordCategory.TRAUMA),
    ("severe injury", KeywordCategory.TRAUMA),
    ("broken bone", KeywordCategory.TRAUMA),
    ("head injury", KeywordCategory.TRAUMA),
    ("severe burn", KeywordCategory.TRAUMA),
    ("suicide", KeywordCategory.PSYCHIATRIC),
    ("suicidal", KeywordCategory.PSYCHIATRIC),
    ("poisoning", KeywordCategory.OTHER),
    ("overdose", KeywordCategory.OTHER),
    ("severe allergic reaction", KeywordCategory.OTHER),
    ("anaphylaxis", KeywordCategory.OTHER),
    ("severe pain", KeywordCategory.OTHER),
    ("unbearable pain", KeywordCategory.OTHER),
)

_ADVISORIES: dict[str, str] = {
    "en": """🚨 EMERGENCY DETECTED 🚨

Your symptoms indicate a potentially life-threatening situation that requires IMMEDIATE medical attention.

⚠️ DO NOT WAIT - ACT NOW:
📞 Call Emergency Services: 108 (India)
🏥 Go to the nearest hospital emergency room immediately
👨‍⚕️ If available, contact your doctor right away

This is a medical emergency. AI guidance cannot replace emergency medical care.

Stay calm and seek help immediately.""",
    "hi": """🚨 आपातकाल का पता चला 🚨

आपके लक्षण एक संभावित जीवन-घातक स्थिति का संकेत देते हैं जिसके लिए तत्काल चिकित्सा ध्यान की आवश्यकता है।

⚠️ प्रतीक्षा न करें - अभी कार्य करें:
📞 आपातकालीन सेवाएं कॉल करें: 108 (भारत)
🏥 तुरंत निकटतम अस्पताल के आपातकालीन कक्ष में जाएं
👨‍⚕️ यदि उपलब्ध हो, तो तुरंत अपने डॉक्टर से संपर्क करें

यह एक चिकित्सा आपातकाल है। AI मार्गदर्शन आपातकालीन चिकित्सा देखभाल का स्थान नहीं ले सकता।

शांत रहें और तुरंत सहायता लें।""",
    "ta": """🚨 அவசரநிலை கண்டறியப்பட்டது 🚨

உங்கள் அறிகுறிகள் உடனடி மருத்துவ கவனிப்பு தேவைப்படும் உயிருக்கு ஆபத்தான நிலையைக் குறிக்கின்றன.

⚠️ காத்திருக்க வேண்டாம் - இப்போதே செயல்படுங்கள்:
📞 அவசர சேவைகளை அழைக்கவும்: 108 (இந்தியா)
🏥 உடனடியாக அருகிலுள்ள மருத்துவமனை அவசர அறைக்குச் செல்லுங்கள்
👨‍⚕️ கிடைத்தால், உடனடியாக உங்கள் மருத்துவரைத் தொடர்பு கொள்ளுங்கள்

இது ஒரு மருத்துவ அவசரநிலை. AI வழிகாட்டுதல் அவசர மருத்துவ பராமரிப்பை மாற்ற முடியாது.

அமைதியாக இருங்கள் மற்றும் உடனடியாக உதவி பெறுங்கள்.""",
    "te": """🚨 అత్యవసర పరిస్థితి గుర్తించబడింది 🚨

మీ లక్షణాలు తక్షణ వైద్య సంరక్షణ అవసరమయ్యే ప్రాణాంతక పరిస్థితిని సూచిస్తున్నాయి.

⚠️ వేచి ఉండకండి - ఇప్పుడే చర్య తీసుకోండి:
📞 అత్యవసర సేవలకు కాల్ చేయండి: 108 (భారతదేశం)
🏥 వెంటనే సమీప ఆసుపత్రి అత్యవసర విభాగానికి వెళ్లండి
👨‍⚕️ అందుబాటులో ఉంటే, వెంటనే మీ వైద్యుడిని సంప్రదించండి

ఇది వైద్య అత్యవసర పరిస్థితి. AI మార్గదర్శకత్వం అత్యవసర వైద్య సంరక్షణను భర్తీ చేయలేదు.

ప్రశాంతంగా ఉండండి మరియు వెంటనే సహాయం పొందండి.""",
    "bn": """🚨 জরুরি অবস্থা সনাক্ত করা হয়েছে 🚨

আপনার লক্ষণগুলি একটি সম্ভাব্য জীবন-হুমকিপূর্ণ পরিস্থিতি নির্দেশ করে যার জন্য অবিলম্বে চিকিৎসা মনোযোগ প্রয়োজন।

⚠️ অপেক্ষা করবেন না - এখনই কাজ করুন:
📞 জরুরি সেবায় কল করুন: 108 (ভারত)
🏥 অবিলম্বে নিকটতম হাসপাতালের জরুরি কক্ষে যান
👨‍⚕️ উপলব্ধ থাকলে, অবিলম্বে আপনার ডাক্তারের সাথে যোগাযোগ করুন

এটি একটি চিকিৎসা জরুরি অবস্থা। AI নির্দেশনা জরুরি চিকিৎসা সেবা প্রতিস্থাপন করতে পারে না।

শান্ত থাকুন এবং অবিলম্বে সাহায্য নিন।""",
}


@lru_cache
def default_keyword_table() -> EmergencyKeywordTable:
    """Build the process-wide emergency keyword table."""
    return EmergencyKeywordTable(
        keywords=tuple(EmergencyKeyword(phrase=p, category=c) for p, c in _KEYWORDS)
    )


@lru_cache
def default_advisories(default_language: str = "en") -> LocalizedAdvisory:
    """Build the advisory table (en, hi, ta, te, bn) with the given fallback language."""
    return LocalizedAdvisory(messages=_ADVISORIES, default_language=default_language)
