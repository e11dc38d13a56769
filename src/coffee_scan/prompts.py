"""Prompts sent to vision-language models."""

VISION_PROMPT_BASIC = """You are a coffee expert analyzing a coffee bag label. Extract the following information from the image:

1. Roaster/Brand name
2. Coffee product name
3. Origin (country/region)
4. Roast level
5. Basic flavor notes (if visible)

Return ONLY a JSON object with this structure:
{
  "roaster": "string or null",
  "productName": "string or null",
  "origin": "string or null",
  "roastLevel": "string or null",
  "flavorNotes": ["array of strings or empty array"]
}

Be precise and only include information you can clearly see on the label."""

VISION_PROMPT_DETAILED = """You are an expert coffee analyst examining a coffee bag label. Extract ALL visible information with high precision:

REQUIRED FIELDS:
- Roaster/Brand name
- Coffee product name
- Origin (country, region, farm if visible)
- Roast level
- Processing method (washed, natural, honey, etc.)
- Flavor/tasting notes
- Varietal/cultivar
- Altitude (if mentioned)
- Harvest year (if mentioned)
- Price (if visible)
- Weight/size (if visible)
- Any brewing recommendations

Return ONLY a JSON object with this exact structure:
{
  "roaster": "string or null",
  "productName": "string or null",
  "origin": "string or null",
  "region": "string or null",
  "farm": "string or null",
  "varietal": ["array of strings or empty array"],
  "processingMethod": "string or null",
  "roastLevel": "string or null",
  "flavorNotes": ["array of strings or empty array"],
  "altitude": "number or null (in meters)",
  "harvestYear": "number or null",
  "price": "string or null (include currency if visible)",
  "weight": "string or null",
  "brewRecommendations": ["array of strings or empty array"]
}

Important:
- Only include information clearly visible on the label
- For arrays, include individual items (e.g., ["chocolate", "caramel"] not ["chocolate, caramel"])
- For altitude, convert to meters if in feet
- Be conservative - if uncertain, use null
- Standardize roast levels: light, medium-light, medium, medium-dark, dark
- Standardize processing: washed, natural, honey, wet-hulled, experimental"""


def prompt_for_depth(depth: str) -> str:
    return VISION_PROMPT_BASIC if depth == "basic" else VISION_PROMPT_DETAILED
