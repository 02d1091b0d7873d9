# {0}: keyword list, {1}: role/JD framing, {2}: original point
RELEVANT_PROMPT = """Rewrite the following resume bullet point to be more impactful and concise, starting directly with a strong action verb. Use the CAR (Challenge-Action-Result) or STAR (Situation-Task-Action-Result) framework as a guideline to structure the *content* (ensuring you cover the situation/challenge, the action taken, and the result), but ensure the final statement flows naturally and begins with the action. Incorporate relevant keywords from this list where appropriate: "{0}". Focus on the context of {1}. Provide 1 or 2 distinct rewritten suggestions ONLY, each on a new line. Do not include the original point or introductory text. Example: 'Spearheaded the development of a new reporting system resulting in a 15% reduction in processing time.'

Original Point: "{2}\""""

# {0}: original point
GENERAL_PROMPT = """Rewrite the following resume bullet point to be more impactful and concise for general resume use, starting directly with a strong action verb. Use the CAR (Challenge-Action-Result) or STAR (Situation-Task-Action-Result) framework as a guideline to structure the *content* (ensuring you cover the situation/challenge, the action taken, and the result), but ensure the final statement flows naturally and begins with the action. Focus on quantifying results if possible. Do NOT force relevance to any specific role or keywords. Provide 1 or 2 distinct rewritten suggestions ONLY, each on a new line. Do not include the original point or introductory text. Example: 'Optimized database queries, improving application response time by 20%.'

Original Point: "{0}\""""
