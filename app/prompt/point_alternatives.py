PROMPT = """Rewrite the following resume bullet point 3 different ways using the STAR (Situation-Task-Action-Result) or CAR (Challenge-Action-Result) method: "{0}"

Focus on:
* Starting with strong action verbs.
* Quantifying achievements whenever possible (e.g., increased sales by 15%, reduced errors by 25%).
* Highlighting the impact of the actions taken.
* Keeping each rewritten point concise and impactful.

Provide only the 3 rewritten bullet points, each on a new line. Do not include introductory phrases like "Here are the suggestions:" or the original point.
Example of one rewritten point: "Led a team of 5 engineers to develop a new feature, resulting in a 10% increase in user engagement.\""""
