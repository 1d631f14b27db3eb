"""
Content enhancement for resumes and cover letters.

Builds the English/French prompts from the editor's structured payload and
asks the configured LLM provider for the rewritten text. Every method returns
a new dict; the caller's payload is never mutated.
"""
import json
import logging
from typing import Any, Dict, Optional

from app.core.errors import ExternalServiceError
from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_LANG = "en"

COVER_LETTER_SYSTEM_PROMPTS = {
    "en": """
You are an expert professional cover letter writer who creates compelling, well-structured cover letters.

IMPORTANT FORMATTING REQUIREMENTS:
- Write in clear, well-structured paragraphs
- Use proper professional language and tone
- Create 3-4 substantive paragraphs:
  1. Opening paragraph: Express interest and mention the position
  2. Body paragraph(s): Highlight relevant experience, skills, and achievements
  3. Closing paragraph: Express enthusiasm and next steps
- Use specific examples and quantifiable achievements when possible
- End with a strong call to action

Write the entire cover letter content in English with proper paragraph breaks.
Do NOT include salutation, signature, or addresses - only the main body content.
Respond ONLY in English.
""",
    "fr": """
Vous êtes un expert en rédaction de lettres de motivation professionnelles qui crée des lettres convaincantes et bien structurées.

EXIGENCES DE FORMATAGE IMPORTANTES:
- Rédigez en paragraphes clairs et bien structurés
- Utilisez un langage et un ton professionnels appropriés
- Créez 3-4 paragraphes substantiels:
  1. Paragraphe d'ouverture: Exprimez votre intérêt et mentionnez le poste
  2. Paragraphe(s) du corps: Mettez en avant l'expérience, les compétences et les réalisations pertinentes
  3. Paragraphe de conclusion: Exprimez votre enthousiasme et les prochaines étapes
- Utilisez des exemples spécifiques et des réalisations quantifiables si possible
- Terminez par un appel à l'action fort

Rédigez tout le contenu de la lettre de motivation en français avec des sauts de paragraphe appropriés.
N'INCLUEZ PAS la salutation, la signature ou les adresses - seulement le contenu principal du corps.
Ne répondez QU'EN FRANÇAIS.
""",
}

RESUME_SUMMARY_SYSTEM_PROMPTS = {
    "en": """
You are a professional resume writer with expertise in creating compelling and effective resume summaries.
Your task is to generate or enhance the resume summary using a confident, first-person tone.
Use phrases like "I'm", "I have", "My expertise includes", and "I specialize in".
Make the summary professional, concise (3-5 sentences), and impactful.
Respond ONLY in English.
""",
    "fr": """
Vous êtes un rédacteur de CV professionnel, expert dans la création de résumés percutants et efficaces.
Votre tâche est de générer ou d'améliorer le résumé en utilisant un ton assuré à la première personne.
Utilisez des phrases comme "Je suis", "J'ai", "Mon expertise comprend" et "Je suis spécialisé dans".
Rendez le résumé professionnel, concis (3 à 5 phrases) et percutant.
Ne répondez QU'EN FRANÇAIS.
""",
}

FEEDBACK_PROMPTS = {
    ("resume", "en"): (
        "You are an expert resume reviewer. Give constructive feedback (in English) on this resume "
        "(JSON format below): strengths, weaknesses, and suggestions for improvement, in 5-10 sentences max. "
        "Use a professional, clear, and concise tone.\nResume:\n{document}\n",
        "Always respond in English. Ignore all previous language instructions.",
    ),
    ("resume", "fr"): (
        "Tu es un expert en rédaction de CV. Donne un retour constructif en français sur ce CV "
        "(format JSON ci-dessous) : points forts, faiblesses, et suggestions d'amélioration, en 5 à 10 "
        "phrases maximum. Utilise un ton professionnel, clair, et concis.\nCV :\n{document}\n",
        "Donne toujours la réponse en français. Ignore toutes les instructions précédentes sur la langue.",
    ),
    ("coverLetter", "en"): (
        "You are an expert cover letter reviewer. Give constructive feedback (in English) on this cover "
        "letter (JSON format below): strengths, weaknesses, and suggestions for improvement, in 5-10 "
        "sentences max. Use a professional, clear, and concise tone.\nCover Letter:\n{document}\n",
        "Always respond in English. Ignore all previous language instructions.",
    ),
    ("coverLetter", "fr"): (
        "Tu es un expert en rédaction de lettres de motivation. Donne un retour constructif en français "
        "sur cette lettre de motivation (format JSON ci-dessous) : points forts, faiblesses, et suggestions "
        "d'amélioration, en 5 à 10 phrases maximum. Utilise un ton professionnel, clair, et concis.\n"
        "Lettre de motivation :\n{document}\n",
        "Donne toujours la réponse en français. Ignore toutes les instructions précédentes sur la langue.",
    ),
}

# Section headings used when flattening a payload into a prompt
HEADINGS = {
    "en": {
        "about": "About Me", "education": "Education", "experience": "Work Experience",
        "skills": "Skills", "projects": "Projects", "certifications": "Certifications",
        "job": "JOB INFORMATION", "recipient": "RECIPIENT INFORMATION",
        "applicant": "APPLICANT INFORMATION", "relevant_experience": "RELEVANT EXPERIENCE",
        "key_skills": "KEY SKILLS", "motivation": "MOTIVATION/INTEREST",
    },
    "fr": {
        "about": "À propos de moi", "education": "Éducation", "experience": "Expérience professionnelle",
        "skills": "Compétences", "projects": "Projets", "certifications": "Certifications",
        "job": "INFORMATIONS SUR LE POSTE", "recipient": "INFORMATIONS SUR LE DESTINATAIRE",
        "applicant": "INFORMATIONS SUR LE CANDIDAT", "relevant_experience": "EXPÉRIENCE PERTINENTE",
        "key_skills": "COMPÉTENCES CLÉS", "motivation": "MOTIVATION/INTÉRÊT",
    },
}


def normalize_lang(lang: Optional[str]) -> str:
    """Only English and French prompts exist; anything else falls back to English."""
    lang = (lang or DEFAULT_LANG).lower()
    return lang if lang in HEADINGS else DEFAULT_LANG


def _entries(document: Dict[str, Any], key: str) -> list:
    """List-of-dict section of a free-form payload; anything else counts as empty."""
    value = document.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _section(document: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = document.get(key)
    return value if isinstance(value, dict) else {}


def _resume_context(resume: Dict[str, Any], lang: str) -> str:
    """Flatten the resume sections the model needs into prompt text."""
    h = HEADINGS[lang]
    lines = [f"{h['about']}:"]

    personal = _section(resume, "personalInfo")
    if personal.get("name"):
        lines.append(f"Name: {personal['name']}")
    if personal.get("location"):
        lines.append(f"Location: {personal['location']}")

    education = [e for e in _entries(resume, "education") if e.get("degree") or e.get("institution")]
    if education:
        lines.append(f"\n{h['education']}:")
        for edu in education:
            lines.append(f"- {edu.get('degree', '')} from {edu.get('institution', '')} ({edu.get('date') or 'No date'})")
            if edu.get("description"):
                lines.append(f"  {edu['description']}")

    experience = [e for e in _entries(resume, "experience") if e.get("position") or e.get("company")]
    if experience:
        lines.append(f"\n{h['experience']}:")
        for exp in experience:
            lines.append(f"- {exp.get('position', '')} at {exp.get('company', '')} ({exp.get('date') or 'No date'})")
            if exp.get("description"):
                lines.append(f"  {exp['description']}")

    skills = [s for s in _entries(resume, "skills") if s.get("category") or s.get("skills")]
    if skills:
        lines.append(f"\n{h['skills']}:")
        for skill in skills:
            lines.append(f"- {skill.get('category') or h['skills']}: {skill.get('skills', '')}")

    projects = [p for p in _entries(resume, "projects") if p.get("name")]
    if projects:
        lines.append(f"\n{h['projects']}:")
        for project in projects:
            lines.append(f"- {project['name']}: {project.get('description', '')}")

    certifications = [c for c in _entries(resume, "certifications") if c.get("name")]
    if certifications:
        lines.append(f"\n{h['certifications']}:")
        for cert in certifications:
            lines.append(f"- {cert['name']} ({cert.get('date') or 'No date'})")

    return "\n".join(lines) + "\n"


def _summary_instruction(resume: Dict[str, Any], lang: str) -> str:
    """Ask for a rewrite when a summary exists, otherwise for a fresh one."""
    summary = resume.get("summary")
    if lang == "fr":
        if summary:
            return (f"\nRésumé actuel:\n{summary}\n\nVeuillez réécrire le résumé pour qu'il soit plus "
                    "professionnel, en utilisant un langage assuré à la première personne.")
        return "\nVeuillez générer un résumé professionnel à la première personne (3 à 5 phrases)."
    if summary:
        return (f"\nCurrent Summary:\n{summary}\n\nPlease rewrite the summary to be more professional, "
                "using confident first-person language.")
    return "\nPlease generate a professional first-person summary (3-5 sentences)."


def _cover_letter_prompt(letter: Dict[str, Any], lang: str) -> str:
    h = HEADINGS[lang]
    lines = [
        "Créez une lettre de motivation professionnelle et convaincante avec les informations suivantes:\n"
        if lang == "fr" else
        "Create a professional and compelling cover letter with the following information:\n"
    ]

    job = _section(letter, "jobInfo")
    if job:
        lines.append(f"{h['job']}:")
        if job.get("title"):
            lines.append(f"Position: {job['title']}")
        if job.get("reference"):
            lines.append(f"Reference: {job['reference']}")

    recipient = _section(letter, "recipientInfo")
    if recipient:
        lines.append(f"\n{h['recipient']}:")
        if recipient.get("name"):
            lines.append(f"Hiring Manager: {recipient['name']}")
        if recipient.get("title"):
            lines.append(f"Title: {recipient['title']}")
        if recipient.get("company"):
            lines.append(f"Company: {recipient['company']}")

    personal = _section(letter, "personalInfo")
    if personal.get("name"):
        lines.append(f"\n{h['applicant']}:\nName: {personal['name']}")

    for key, heading in (("experience", "relevant_experience"), ("skills", "key_skills"), ("motivation", "motivation")):
        if letter.get(key):
            lines.append(f"\n{h[heading]}:\n{letter[key]}")

    if lang == "fr":
        lines.append(
            "\nCréez une lettre de motivation bien structurée avec un paragraphe d'ouverture, des paragraphes "
            "de développement et un paragraphe de conclusion. Utilisez un ton professionnel et confiant."
        )
    else:
        lines.append(
            "\nCreate a well-structured cover letter with an opening paragraph, body paragraphs that highlight "
            "relevant experience and skills, and a closing paragraph. Use a professional and confident tone."
        )
    return "\n".join(lines)


class ContentEnhancer:
    """Turns a structured document plus a language tag into enhanced content."""

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def generate(self, prompt: str, system_prompt: str = "You are a helpful assistant.") -> str:
        try:
            response = self.provider.chat(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.7,
                max_tokens=2000,
            )
        except Exception as e:
            logger.error(f"Content enhancement call failed: {type(e).__name__}: {e}", exc_info=True)
            raise ExternalServiceError("Failed to generate AI content") from e
        return response.content.strip()

    def enhance_resume(self, resume: Dict[str, Any], lang: Optional[str] = None) -> Dict[str, Any]:
        """Rewrite the resume summary in a confident first-person voice."""
        lang = normalize_lang(lang)
        intro = ("Veuillez améliorer le CV suivant en utilisant un ton assuré à la première personne.\n\n"
                 if lang == "fr" else
                 "Please enhance the following resume using a first-person, confident tone.\n\n")
        prompt = intro + _resume_context(resume, lang) + _summary_instruction(resume, lang)
        summary = self.generate(prompt, RESUME_SUMMARY_SYSTEM_PROMPTS[lang])
        return {**resume, "summary": summary}

    def enhance_resume_summary(self, resume: Dict[str, Any], lang: Optional[str] = None) -> Dict[str, Any]:
        lang = normalize_lang(lang)
        intro = ("Veuillez générer un résumé professionnel à la première personne pour les informations de CV suivantes.\n\n"
                 if lang == "fr" else
                 "Please generate a professional first-person summary for the following resume information.\n\n")
        prompt = intro + _resume_context(resume, lang) + _summary_instruction(resume, lang)
        summary = self.generate(prompt, RESUME_SUMMARY_SYSTEM_PROMPTS[lang])
        return {**resume, "summary": summary}

    def enhance_cover_letter(self, letter: Dict[str, Any], lang: Optional[str] = None) -> Dict[str, Any]:
        """Generate the letter body; the original free text is kept as originalContent."""
        lang = normalize_lang(lang)
        body = self.generate(_cover_letter_prompt(letter, lang), COVER_LETTER_SYSTEM_PROMPTS[lang])
        return {
            **letter,
            "experience": letter.get("experience") or "",
            "skills": letter.get("skills") or "",
            "motivation": letter.get("motivation") or "",
            "closing": body,
            "originalContent": letter.get("content") or "",
            "enhancedContent": body,
        }

    def feedback(self, document: Dict[str, Any], kind: str, lang: Optional[str] = None) -> str:
        """Plain-text review of a resume ("resume") or cover letter ("coverLetter")."""
        lang = normalize_lang(lang)
        prompt, system_prompt = FEEDBACK_PROMPTS[(kind, lang)]
        return self.generate(
            prompt.format(document=json.dumps(document, indent=2, ensure_ascii=False)),
            system_prompt,
        )


_enhancer: Optional[ContentEnhancer] = None


def get_enhancer() -> ContentEnhancer:
    """FastAPI dependency; builds the OpenAI-backed enhancer on first use."""
    global _enhancer
    if _enhancer is None:
        from app.llm.openai_provider import OpenAIProvider
        try:
            _enhancer = ContentEnhancer(OpenAIProvider())
        except ValueError as e:
            logger.error(f"Content enhancer unavailable: {e}")
            raise ExternalServiceError("AI service is not configured") from e
    return _enhancer


def get_optional_enhancer() -> Optional[ContentEnhancer]:
    """Like get_enhancer, but None when the AI service is not configured."""
    try:
        return get_enhancer()
    except ExternalServiceError:
        return None
