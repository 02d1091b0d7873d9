SCHEMA = {
    "name": "string (Full Name)",
    "contactInfo": {
        "phone": "string",
        "email": "string",
        "linkedin": "string (URL, optional)",
        "location": "string (City, State/Country)",
    },
    "summary": "string (Professional summary paragraph)",
    "experience": [
        {
            "company": "string",
            "location": "string (optional)",
            "dates": "string (e.g., YYYY-MM - YYYY-MM or Present)",
            "title": "string",
            "accomplishments": ["string (bullet point)", "string"],
        }
    ],
    "education": [
        {
            "degree": "string",
            "institution": "string",
            "date": "string (e.g., YYYY or YYYY-MM)",
        }
    ],
    "skills": {
        "category (e.g., Programming Languages)": ["string", "string"],
        "category (e.g., Tools)": ["string"],
    },
}
