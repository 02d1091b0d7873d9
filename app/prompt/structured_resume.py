PROMPT = """
Analyze the following resume text and extract its content into a structured JSON object. Adhere strictly to this JSON format:
```json
{0}
```

- Extract the full name.
- Extract contact information (phone, email, LinkedIn URL if present, location).
- Extract the professional summary or objective statement.
- For each work experience entry, extract company name, location (if available), dates of employment, job title, and a list of accomplishment/responsibility bullet points.
- For each education entry, extract degree name, institution name, and graduation/attendance date.
- Extract skills, attempting to group them into logical categories (like 'Programming Languages', 'Tools', 'Certifications') if possible, otherwise provide a single list under a generic 'Skills' key. If grouping, the value should be an array of strings.
- Preserve all key information accurately. If a section (like summary or a specific contact field) is missing, use null or an empty string/array as appropriate for the field type.
- Output ONLY the valid JSON object. Do not include any other text before or after it.

Resume Text:
---
{1}
---

JSON Output:"""
