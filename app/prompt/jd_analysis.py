PROMPT = """Analyze the following job description text and provide a structured summary. Extract the core information into these three sections:
1. **Job Description:** A concise summary of the overall job purpose and context.
2. **Roles and Responsibilities:** A bulleted list of the primary tasks and duties mentioned.
3. **Candidate Requirements:** A bulleted list of the essential qualifications, skills, and experience explicitly stated.

Focus on accuracy and clarity based *only* on the provided text. If the text is unclear or lacks information for a section, state that clearly (e.g., "Not specified in the text."). Do not invent or infer information beyond what is written.

Job Description Text:
---
{0}
---"""
