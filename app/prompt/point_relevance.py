PROMPT = """Is the following resume bullet point relevant to {0}? Respond ONLY with "yes" or "no".

Bullet Point: "{1}\""""
