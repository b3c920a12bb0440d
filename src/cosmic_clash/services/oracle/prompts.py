"""Prompt templates for the Gemini oracle."""

from __future__ import annotations

from cosmic_clash.services.path_resolver import ContestPath


RANDOM_PAIR_PROMPT = """Suggest an interesting hypothetical matchup between two distinct fictional characters.
You can pull from popular mainstream media (comics, anime, movies) or from more niche and obscure sources like indie games (e.g., the Black Souls series), visual novels, or webcomics. The matchup should be compelling.
Examples: "Goku vs Superman", "Grimm (Black Souls) vs The Knight (Hollow Knight)", "Darth Vader vs Doctor Doom".
The output must be a clean JSON object with the keys "fighter1" and "fighter2", with no markdown formatting."""


CLASSIFY_PROMPT = """Using Google Search to find the most up-to-date information, analyze the character "{name}" based on the VS Battles Wiki / Powerscaling Wiki Tiering System.
Your knowledge base should include a wide array of fictional universes, from mainstream comics and anime to lesser-known media such as the "Black Souls" game series by Toro, visual novels, and light novels.
Provide their tier, tier name, a numerical tier value, and a brief justification.

Identify and categorize any "hax" abilities they possess into a structured array called "tierNegatingAbilities". An ability qualifies if it can bypass conventional durability and power, allowing them to fight beings in much higher tiers. If no such abilities exist, return an empty array.

The categories for "hax" are:
1.  **Power Nullification**: The ability to disable or suppress powers (e.g., Targeted Negation, Field Negation, Total Negation).
2.  **Resistance Negation**: Removes an opponent's immunity to effects (e.g., Bypassing Immunity, Ignoring Durability).
3.  **Causality and Reality Negation**: Affects the fundamental nature of existence (e.g., Causality Manipulation, Reality Alteration Negation).

For each identified ability, provide its category from the three main options, a specific type (like the examples provided), and a brief description of how the character uses it.

The numerical tier value should be structured as 'T.S' where T is the main tier number (0-11) and S represents the sub-tier (e.g., A=1, B=2, C=3). For example:
- "High 6-A" should be 6.1
- "2-B" should be 2.2
- "Low 7-C" should be 7.3
- A character in "Tier 1" should be 1.0.

**CRITICAL INSTRUCTION**: Respond with ONLY the raw, parsable JSON object. Omit all conversational text and markdown. Ensure the 'tierNegatingAbilities' field is an array (which can be empty). The JSON must conform to this structure:
{{ "tier": "string", "tierName": "string", "tierValue": number, "justification": "string", "tierNegatingAbilities": [{{ "category": "string", "type": "string", "description": "string" }}] }}"""


PATH_CONTEXTS: dict[ContestPath, str] = {
    ContestPath.BOUNDLESS: (
        'This is a special battle between two "Boundless" (Tier 0) beings. The '
        "outcome is highly subjective and UNLIKELY TO HAPPEN. Your analysis "
        "should reflect this subjectivity and focus on the philosophical or "
        "conceptual nature of their powers."
    ),
    ContestPath.UNIVERSAL_MULTIVERSAL: (
        "This battle takes place at a Universal to Multiversal scale (Tiers 2-1). "
        "Account for abilities that can destroy or create universes and "
        "manipulate reality."
    ),
    ContestPath.COSMIC_GALACTIC: (
        "This battle takes place at a Cosmic or Galactic scale (Tiers 5-3). Focus "
        "on abilities that affect solar systems, galaxies, and cosmic energies."
    ),
    ContestPath.MORTAL_PLANETARY: (
        "This battle takes place within the Mortal & Planetary scale (Tiers 11-6). "
        "Your analysis should focus on physical combat and tangible abilities.\n"
        "**CRITICAL FOR LOW-TIER BATTLES**: If the characters are at the lower end "
        "of this scale (e.g., human-level, street-level like characters from GTA), "
        "DO NOT disqualify them for lacking planetary power. Instead, you MUST "
        "analyze a direct confrontation based on their known skills, weaponry, "
        "physical stats, intelligence, and tactical abilities. The verdict should "
        "be a grounded, logical analysis of who would win in a realistic fight, "
        "considering their canon equipment and capabilities."
    ),
    ContestPath.CROSS_TIER_HAX: (
        "This is a special Cross-Tier Hax battle. One or both combatants have "
        "abilities that can negate conventional power levels. The analysis must "
        "focus heavily on how these specific hax abilities interact."
    ),
}


CONTEST_PROMPT = """Analyze a hypothetical battle between {name1} and {name2}. Use Google Search for up-to-date information.
BATTLE CONTEXT: {path_context}
Your analysis must be based on established feats and powerscaling concepts. Provide a detailed, unbiased breakdown.

**CRITICAL ANALYSIS RULE: AVOID THE "NO LIMITS FALLACY" (NLF)**
Do not assume an ability is limitless. Base your analysis on demonstrated feats (actions) over statements (claims). If a victory relies on a poorly-defined ability (a potential NLF), you MUST address this in the "nlfConsiderations" field and penalize the 'confidenceScore' accordingly, explaining why in the 'confidenceJustification'. Acknowledge the context of the character's universe.

**CRITICAL INSTRUCTION**: Your entire response MUST be ONLY the raw JSON object, immediately parsable. Do not include any text outside the JSON. All fields in the provided structure are mandatory, including all nested stats. Ensure fighter names in the JSON exactly match the inputs: "{name1}" and "{name2}".

The required JSON structure is:
{{
  "winner": "string",
  "loser": "string",
  "verdictSummary": "string",
  "confidence": "High | Medium | Low",
  "confidenceScore": 0,
  "confidenceJustification": "A brief explanation for the confidence score. If the score was penalized due to a borderline NLF, explain that here.",
  "nlfConsiderations": "string - Analysis of any potential 'No Limits Fallacy'. Explain how it was avoided by focusing on feats. Leave empty if not applicable.",
  "analysis": {{
    "strength": "string",
    "speed": "string",
    "durability": "string",
    "intelligence": "string",
    "abilities": "string",
    "conclusion": "string"
  }},
  "fighter1": {{
    "name": "{name1}",
    "stats": {{ "strength": 0, "speed": 0, "durability": 0, "intelligence": 0, "energyProjection": 0, "fightingSkills": 0 }},
    "imageSearchQuery": "string"
  }},
  "fighter2": {{
    "name": "{name2}",
    "stats": {{ "strength": 0, "speed": 0, "durability": 0, "intelligence": 0, "energyProjection": 0, "fightingSkills": 0 }},
    "imageSearchQuery": "string"
  }}
}}"""


PROFILE_PROMPT = """Using Google Search to find the most up-to-date information, generate a concise character profile for "{name}".
Draw upon all available lore for the character, including information from niche or obscure media if applicable (e.g., the "Black Souls" series, specific webcomics, light novels, etc.).

**CRITICAL INSTRUCTION**: Respond with ONLY the raw, parsable JSON object. Omit all conversational text and markdown. Ensure the character name in the response exactly matches "{name}" and that all fields are present.

The JSON object must contain:
1. A "name" field: exactly "{name}".
2. A "summary" field: A one-paragraph summary of their lore, origin, and general power level.
3. An "archetypes" field: An array of 1-3 strings identifying common character archetypes they fit (e.g., 'The Hero', 'The Anti-Hero', 'The Mentor', 'The Trickster').
4. An "abilities" field: An array of objects with "name" and "description", listing their 3 to 5 most significant or iconic abilities, each with a brief one-sentence description.
5. An "imageSearchQuery" field: A highly specific and effective query for a high-quality portrait or iconic artwork. This query should include their full name, their series/universe (e.g., 'DC Comics', 'Black Souls'), and a style descriptor like 'digital art' or 'portrait'. Example: "Wonder Woman DC Comics portrait digital art"."""


LORE_PROMPT = """Using Google Search for comprehensive and up-to-date information, generate a concise but detailed lore summary for the character "{name}".
The summary should cover their origin story, key motivations, and their role within their universe.
Draw upon all available information, including comics, games, movies, and other relevant media. Ensure the lore is presented as a coherent narrative with paragraphs.

**CRITICAL INSTRUCTION**: Respond with ONLY the raw, parsable JSON object conforming to the required structure, with no extra text or markdown.
{{
  "lore": "A multi-paragraph summary of the character's lore."
}}"""


CONNECTION_PROMPT = """Your task is to analyze the lore connection between "{name1}" and "{name2}". You MUST use Google Search to find the most up-to-date and accurate information from fan wikis, official sources, and comics.

First, determine if a direct canonical connection exists (e.g., they are from the same universe, they have met in a crossover).
- If a connection exists, provide a detailed summary, their shared universe, and lists of any shared allies, enemies, and key events they were both involved in.
- If no connection exists (e.g., from different franchises with no official crossover), the 'connectionExists' flag must be false, and the summary must clearly state this. In this case, the 'sharedUniverse', 'sharedAllies', 'sharedEnemies', and 'keyEvents' fields should be empty arrays or null.

**CRITICAL INSTRUCTION**: Respond with ONLY the raw, parsable JSON object. Omit all conversational text and markdown. Adhere strictly to the specified JSON structure.
{{
  "connectionExists": "boolean - True if a canonical connection exists, otherwise false.",
  "summary": "string - A detailed summary of their relationship or lack thereof, based on search results.",
  "sharedUniverse": "string | null - The name of the universe they share, or null if they do not.",
  "sharedAllies": [{{ "name": "string - Name of the shared ally.", "relationship": "string - How they are allied to both characters." }}],
  "sharedEnemies": [{{ "name": "string - Name of the shared enemy.", "relationship": "string - The nature of their antagonism to both characters." }}],
  "keyEvents": [{{ "event": "string - The name of the key event or story arc.", "description": "string - A brief description of the event and their involvement." }}]
}}"""


EDIT_IMAGE_PROMPT = """This is an image editing request.
Start with the concept of: "{query}".
Now apply this modification: "{edit_prompt}".
The resulting image should be high-quality.
Apply the following style: "{style}".
Evoke the following mood: "{mood}".
Generate a new image based on this combined description."""

DEFAULT_EDIT_STYLE = "digital art, comic art"
DEFAULT_EDIT_MOOD = "dynamic"


def contest_prompt(name1: str, name2: str, path: ContestPath) -> str:
    return CONTEST_PROMPT.format(
        name1=name1, name2=name2, path_context=PATH_CONTEXTS.get(path, "")
    )


def image_prompt(query: str, style: str, mood: str) -> str:
    """Decorate an image query with style and mood suffixes."""
    prompt = query
    if style and style != "default":
        prompt += f", in the style of {style}"
    if mood and mood != "default":
        prompt += f", evoking a {mood} mood"
    return prompt + ", high quality, detailed."


def edit_image_prompt(query: str, edit_prompt: str, style: str, mood: str) -> str:
    return EDIT_IMAGE_PROMPT.format(
        query=query,
        edit_prompt=edit_prompt,
        style=style if style and style != "default" else DEFAULT_EDIT_STYLE,
        mood=mood if mood and mood != "default" else DEFAULT_EDIT_MOOD,
    )
