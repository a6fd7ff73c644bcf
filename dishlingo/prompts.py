"""Prompts for OpenAI models."""

VALIDATION_PROMPT = """Look at this image and determine if it's a restaurant menu or contains restaurant menu content.

A restaurant menu should have:
- Food/drink items with names
- Prices (optional)
- Categories like appetizers, mains, desserts, beverages
- Restaurant branding/name (optional)

Answer with only one word: "YES" if this appears to be a restaurant menu, or "NO" if it's not a restaurant menu."""

EXTRACTION_PROMPT = """Analyze this restaurant menu image and extract all dish names. For each dish, provide:
1. The original dish name (as it appears in the menu)
2. A structured description in this EXACT format: "This is a [dish type]. [2-line description of the dish]. Top ingredients: [main ingredients]"
   - [dish type] should be 1-2 words like: pasta, pizza, salad, soup, steak, cake, ice cream, appetizer, etc.
   - [2-line description] should be 2 sentences explaining what the dish is
   - [main ingredients] should list 3-5 key ingredients
3. Estimate nutritional information (High/Medium/Low for: Calories, Sugar, Unhealthy Fat)

IMPORTANT: Return ONLY valid JSON format. Do not include any text before or after the JSON.

Format your response as a JSON array like this:
[
  {
    "original_name": "Original dish name",
    "simple_description": "This is a pasta. Creamy white sauce pasta with garlic and herbs. Classic Italian comfort food. Top ingredients: pasta, cream, garlic, parmesan, herbs",
    "nutrition": {
      "calories": "High",
      "sugar": "Low",
      "unhealthy_fat": "Medium"
    }
  }
]

Focus on dishes that are clearly visible and readable. If text is in another language, translate it to English. If you cannot find any clear dishes, return an empty array []"""

PRONUNCIATION_PROMPT = (
    "For each dish name below, provide a simple pronunciation using plain English "
    "letters (not IPA). Keep it concise. Return ONLY a JSON object mapping the exact "
    "original dish name to its pronunciation string.\n\n{names_list}"
)

ALLERGEN_PROMPT = (
    "For each dish below, list likely food allergens based on the name and description. "
    "Use common words (milk, egg, wheat/gluten, soy, peanut, tree nut, fish, shellfish, "
    "sesame, mustard, etc.). Keep it short, comma-separated. Return ONLY a JSON object "
    "mapping the exact dish name to its allergens string.\n\n{items_list}"
)

SELF_TEST_PROMPT = (
    "Return a simple JSON object with the message 'OpenAI integration working' and "
    "status 'success'. Return ONLY the JSON, no markdown formatting."
)


def build_pronunciation_prompt(names: list[str]) -> str:
    names_list = "\n".join(f"{i}. {name}" for i, name in enumerate(names, start=1))
    return PRONUNCIATION_PROMPT.replace("{names_list}", names_list)


def build_allergen_prompt(items: list[tuple[str, str]]) -> str:
    items_list = "\n".join(
        f"{i}. Name: {name}\n   Description: {description}"
        for i, (name, description) in enumerate(items, start=1)
    )
    return ALLERGEN_PROMPT.replace("{items_list}", items_list)
