PROMPT = """From the following job description text, extract a list of the most important keywords representing required skills, technologies, tools, methodologies, qualifications, and specific responsibilities. Focus on concrete terms (e.g., "Project Management", "Python", "Salesforce", "Agile", "MBA", "Data Analysis", "Client Communication", "Budget Management", "AWS", "React"). Avoid generic filler words or overly broad terms unless they are explicitly emphasized as requirements. Provide the keywords as a comma-separated list ONLY. Do not add any introductory text.

Job Description Text:
---
{0}
---

Keywords:"""
