"""
User-facing message templates, per locale, plus operator SMS templates.
"""

BASE_LANGUAGE = "en"

RESET_ACKNOWLEDGEMENT = "Session has been reset"

MESSAGES = {
    "en": {
        "errors": {
            "general": "Sorry about that! I'm having some connection issues on my end. Could you please try again in a moment?",
            "savingLead": "I couldn't save your information properly - our system seems to be having a temporary issue. Let me try again later.",
            "mediaProcessing": "I'm having trouble viewing the photo you sent. Could you please try sending it again? Sometimes our connection can be a bit slow.",
        },
        "success": {
            "leadSaved": "Perfect! I've saved all your details and our team will be reaching out to you soon. Is there anything else you'd like to know in the meantime?",
            "languageSet": "Got it! I'll continue in English.",
        },
    },
    "de": {
        "errors": {
            "general": "Entschuldigung, ich habe gerade Verbindungsprobleme. Könnten Sie es bitte in einem Moment noch einmal versuchen?",
            "savingLead": "Ich konnte Ihre Informationen nicht speichern - unser System scheint ein vorübergehendes Problem zu haben. Ich werde es später erneut versuchen.",
            "mediaProcessing": "Ich habe Probleme, das von Ihnen gesendete Foto anzuzeigen. Könnten Sie es bitte erneut senden? Manchmal kann unsere Verbindung etwas langsam sein.",
        },
        "success": {
            "leadSaved": "Perfekt! Ich habe alle Ihre Daten gespeichert und unser Team wird sich in Kürze bei Ihnen melden. Gibt es in der Zwischenzeit noch etwas, das Sie wissen möchten?",
            "languageSet": "Alles klar! Ich schreibe ab jetzt auf Deutsch weiter.",
        },
    },
}

SMS_TEMPLATES = {
    "success": "Lead successfully saved",
    "error": "Error occurred while saving lead, intervention required",
    "systemError": "Critical system error occurred: {errorDetails}",
    "apiFailure": "Problem in API connection",
    "mediaError": "Media processing error",
}


def get_message(language: str, category: str, key: str) -> str:
    """
    Look up a localized message.

    Falls back to the base locale when the language is unknown or has no
    entry for this message.
    """
    localized = MESSAGES.get(language, {}).get(category, {}).get(key)
    if localized:
        return localized
    return MESSAGES[BASE_LANGUAGE][category][key]
