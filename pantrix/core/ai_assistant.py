"""Claude AI integration — recipes, meal plans, geocoding, and the demo's generated data.

All public functions call the Anthropic API using the key stored in the settings
table (or the ANTHROPIC_API_KEY environment variable).  Responses are requested
as JSON inside ```json``` fences and parsed into the dataclasses from
db/models.py.

Every failure reaches the caller as RemoteCallError.  A response that arrives
but cannot be parsed or has the wrong shape is a MalformedRemoteResponse (a
RemoteCallError subclass); its raw text is logged for diagnostics.  A few
lookups fall back to built-in demo data instead of failing, so the demo stays
usable offline: geocoding of well-known cities, business names, nearby food
banks and waste hotspots.
"""

import base64
import json
import logging
import os
import re
from datetime import date
from typing import Any, Optional

import anthropic
import httpx

from pantrix.config import get_setting
from pantrix.core.derived import is_calendar_date
from pantrix.db.models import (
    CATEGORIES,
    DeliveryPerson,
    GeoLocation,
    InventoryItem,
    NearbyFoodBank,
    Nutrition,
    PublicProfile,
    Recipe,
    SmartPlate,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-opus-4-5-20251101"

LANGUAGE_NAMES = {"en": "English", "es": "Spanish", "hi": "Hindi", "fr": "French", "de": "German", "ta": "Tamil"}

FALLBACK_COORDINATES = {
    "New York": GeoLocation(40.7128, -74.0060),
    "Los Angeles": GeoLocation(34.0522, -118.2437),
    "Miami": GeoLocation(25.7617, -80.1918),
    "Denver": GeoLocation(39.7392, -104.9903),
}

FALLBACK_RESTAURANTS = ["The Grand Eatery", "Sunset Bistro", "Ocean's Catch", "Mountain View Grill", "City Center Cafe"]
FALLBACK_FOOD_BANK_NAMES = [
    "City Harvest Food Bank", "Community FoodShare", "Regional Food Pantry",
    "Hope Distribution Center", "The Giving Spoon",
]

FALLBACK_FOOD_BANKS = [
    NearbyFoodBank("City Harvest", "123 Main St, New York, NY", 40.715, -74.002),
    NearbyFoodBank("Food Bank for NYC", "456 Second Ave, New York, NY", 40.729, -73.985),
    NearbyFoodBank("St. John's Bread & Life", "789 Broadway, Brooklyn, NY", 40.693, -73.931),
    NearbyFoodBank("Metropolitan Council on Jewish Poverty", "1010 Tenth Ave, New York, NY", 40.765, -73.990),
    NearbyFoodBank("The Bowery Mission", "227 Bowery, New York, NY", 40.722, -73.993),
]

FALLBACK_HOTSPOTS = [
    {"name": "The Lavish Buffet", "address": "101 City Center, New York, NY", "latitude": 40.7580,
     "longitude": -73.9855, "waste_score": 9, "contact_email": "mgr@lavishbuffet.demo", "contact_phone": "555-0101"},
    {"name": "Gourmet Catering Co.", "address": "202 Commerce St, New York, NY", "latitude": 40.7128,
     "longitude": -74.0060, "waste_score": 8, "contact_email": "contact@gourmetcatering.demo", "contact_phone": "555-0102"},
    {"name": "The Daily Bread Bakery", "address": "303 Artisan Way, Brooklyn, NY", "latitude": 40.6782,
     "longitude": -73.9442, "waste_score": 6, "contact_email": "info@dailybread.demo", "contact_phone": "555-0103"},
    {"name": "Mega Grocery Mart", "address": "404 Supermarket Ave, Queens, NY", "latitude": 40.7282,
     "longitude": -73.7949, "waste_score": 10, "contact_email": "donations@megamart.demo", "contact_phone": "555-0104"},
    {"name": "Harborview Hotel", "address": "505 Waterfront Pl, New York, NY", "latitude": 40.7050,
     "longitude": -74.0090, "waste_score": 9, "contact_email": "events@harborview.demo", "contact_phone": "555-0105"},
]


class RemoteCallError(Exception):
    """Raised when the AI service cannot produce a usable result."""


class MalformedRemoteResponse(RemoteCallError):
    """Raised when the AI service answers with unparseable or wrongly shaped JSON."""

    def __init__(self, message: str, payload: str = "") -> None:
        self.payload = payload
        super().__init__(message)


def _get_api_key() -> Optional[str]:
    """Retrieve the Claude API key from settings, falling back to the environment."""
    return get_setting("claude_api_key") or os.environ.get("ANTHROPIC_API_KEY")


def _get_client():
    """Create and return an Anthropic client. Raises RemoteCallError if no API key is set."""
    api_key = _get_api_key()
    if not api_key:
        raise RemoteCallError("Claude API key not set. Add it under Settings to use AI features.")
    return anthropic.Anthropic(api_key=api_key)


def _model() -> str:
    return get_setting("claude_model") or DEFAULT_MODEL


def _complete(content, max_tokens: int = 2048) -> str:
    """Send one user message and return the text of the reply."""
    client = _get_client()
    try:
        message = client.messages.create(
            model=_model(),
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": content}],
        )
    except anthropic.APIError as e:
        raise RemoteCallError(f"AI request failed: {e}")
    return message.content[0].text


def _extract_json(text: str) -> Any:
    """Extract JSON from Claude's response, fenced or raw."""
    match = re.search(r"```(?:json)?\s*([\s\S]+?)\s*```", text)
    json_str = match.group(1) if match else text.strip()
    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        LOGGER.warning("Malformed JSON from AI model: %r", text)
        raise MalformedRemoteResponse("Received malformed JSON from AI model.", payload=text)


def _require_key(data: Any, key: str, kind: type, text: str) -> Any:
    if not isinstance(data, dict) or not isinstance(data.get(key), kind):
        LOGGER.warning("Unexpected structure from AI model (missing %s): %r", key, text)
        raise MalformedRemoteResponse(f"Unexpected structure: missing '{key}'.", payload=text)
    return data[key]


def language_instruction(language: str) -> str:
    name = LANGUAGE_NAMES.get(language, "English")
    return (
        f"\n\nIMPORTANT: The user's preferred language is {name}. "
        f"You MUST provide the entire response (all values) in {name}, but keep the JSON keys in English."
    )


def _personalization(profile: Optional[PublicProfile], health: bool = False) -> str:
    """Profile hints for recipe prompts. Only public users carry taste/health data."""
    if not isinstance(profile, PublicProfile):
        return ""
    preferences = (
        f"Their taste preferences are: {', '.join(profile.preferences)}."
        if profile.preferences else "They have no specific taste preferences."
    )
    body = ""
    if health:
        body = (
            f" They weigh {profile.weight:g} {profile.weight_unit} and are "
            f"{profile.height:g} {profile.height_unit} tall; take this into account for the "
            "nutritional balance and calorie count."
        )
    return (
        f"\n\nPersonalize for the user. They are from {profile.country}; draw on the local cuisine "
        f"and culinary traditions of their region. {preferences}{body}"
    )


RECIPE_LIST_SCHEMA = """
{
  "recipes": [
    {
      "name": "Recipe Name",
      "description": "Brief, enticing description",
      "ingredients": ["2 cups milk", "1 tbsp sugar"],
      "instructions": ["Step one...", "Step two..."]
    }
  ]
}
"""


def _parse_recipes(text: str) -> list[Recipe]:
    data = _extract_json(text)
    raw_recipes = _require_key(data, "recipes", list, text)
    recipes = []
    for item in raw_recipes:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        recipes.append(Recipe(
            name=item["name"],
            description=item.get("description") or "",
            ingredients=[str(i) for i in item.get("ingredients") or []],
            instructions=[str(s) for s in item.get("instructions") or []],
        ))
    return recipes


def geocode(address: str) -> GeoLocation:
    """Approximate coordinates for a free-text location."""
    prompt = f"""Provide the approximate latitude and longitude for the following location: "{address}".

Return JSON like {{"latitude": 40.71, "longitude": -74.0}}, wrapped in ```json``` code fences."""
    try:
        text = _complete(prompt, max_tokens=256)
        data = _extract_json(text)
        if not isinstance(data, dict):
            raise MalformedRemoteResponse("Unexpected structure for geocoding data.", payload=text)
        lat, lon = data.get("latitude"), data.get("longitude")
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            raise MalformedRemoteResponse("Unexpected structure for geocoding data.", payload=text)
        return GeoLocation(latitude=float(lat), longitude=float(lon))
    except RemoteCallError as e:
        for city, coords in FALLBACK_COORDINATES.items():
            if city in address:
                LOGGER.warning("Geocoding failed (%s); using known coordinates for %s", e, city)
                return coords
        raise RemoteCallError("Could not geocode location from AI model.")


def suggest_recipes(ingredient_name: str, profile: Optional[PublicProfile] = None, language: str = "en") -> list[Recipe]:
    """Three simple recipes that use up one ingredient."""
    prompt = f"""You are an expert chef specializing in reducing food waste. Generate 3 simple and creative recipe ideas for using up the following ingredient: "{ingredient_name}". For each recipe, provide a name, a brief description, a list of ingredients, and step-by-step instructions.{_personalization(profile)}{language_instruction(language)}

Return JSON matching this schema exactly:
{RECIPE_LIST_SCHEMA}
Return only the JSON, wrapped in ```json``` code fences."""
    return _parse_recipes(_complete(prompt))


def suggest_recipes_for_set(ingredient_names: list[str], profile: Optional[PublicProfile] = None, language: str = "en") -> list[Recipe]:
    """Three recipes that together use every one of the given ingredients."""
    prompt = f"""You are a creative restaurant chef skilled at minimizing waste. Create 3 creative and cohesive recipe ideas that use all of the following ingredients that are about to expire: {", ".join(ingredient_names)}.{_personalization(profile)}{language_instruction(language)}

For each recipe, provide a unique name, a short description, a list of ingredients, and step-by-step instructions. Return JSON matching this schema exactly:
{RECIPE_LIST_SCHEMA}
Return only the JSON, wrapped in ```json``` code fences."""
    return _parse_recipes(_complete(prompt))


def suggest_shopping_list(inventory: list[InventoryItem]) -> list[dict]:
    """5-7 predicted purchases that complement the current inventory.

    Returns [{"name": str, "quantity": str, "reason": str}, ...].
    """
    inventory_str = ", ".join(f"{i.name} ({i.quantity})" for i in inventory) or "empty"
    prompt = f"""You are an intelligent pantry assistant. Help the user build a smart shopping list that minimizes food waste and complements their existing inventory.

Current inventory: {inventory_str}.

Generate a predictive shopping list of 5-7 items. Infer likely consumption patterns (e.g. if they have pasta, they might need sauce). For each item give a name, a suggested quantity, and a brief helpful reason such as 'running low', 'pairs well with an expiring item', or 'a healthy staple to have'.

Return JSON like:
```json
{{"shopping_list": [{{"name": "Tomato sauce", "quantity": "1 jar", "reason": "Pairs with your pasta"}}]}}
```
Return only the JSON, wrapped in ```json``` code fences."""
    text = _complete(prompt)
    entries = _require_key(_extract_json(text), "shopping_list", list, text)
    result = []
    for entry in entries:
        if isinstance(entry, dict) and entry.get("name"):
            result.append({
                "name": str(entry["name"]),
                "quantity": str(entry.get("quantity") or ""),
                "reason": str(entry.get("reason") or ""),
            })
    return result


def _normalize_nutrition(raw: Any, text: str) -> Nutrition:
    """Scale the four percentages so they add up to exactly 100."""
    names = ("carbohydrates", "proteins", "fats", "vitamins_and_minerals")
    try:
        values = [float(raw[n]) for n in names]
    except (KeyError, TypeError, ValueError):
        raise MalformedRemoteResponse("Unexpected structure for nutrition data.", payload=text)
    total = sum(values)
    if total <= 0 or any(v < 0 for v in values):
        raise MalformedRemoteResponse("Nutrition percentages must be positive.", payload=text)
    scaled = [round(v * 100 / total, 1) for v in values[:3]]
    scaled.append(round(100 - sum(scaled), 1))
    return Nutrition(*scaled)


def generate_meal_plan(ingredient_names: list[str], profile: Optional[PublicProfile] = None, language: str = "en") -> SmartPlate:
    """One balanced meal using all the given ingredients, with a nutrition breakdown."""
    prompt = f"""You are a nutritionist and chef who specializes in balanced meals that minimize food waste.

Create a "Smart Plate" analysis for a single, cohesive, balanced meal recipe that uses ALL of the following ingredients: {", ".join(ingredient_names)}.{_personalization(profile, health=True)}{language_instruction(language)}

Return JSON matching this schema exactly:
```json
{{
  "name": "Meal name",
  "description": "Why this meal is nutritionally balanced",
  "calories": 650,
  "ingredients": ["..."],
  "instructions": ["..."],
  "nutrition": {{"carbohydrates": 45, "proteins": 25, "fats": 20, "vitamins_and_minerals": 10}}
}}
```
The four nutrition percentages MUST add up to 100. Return only the JSON, wrapped in ```json``` code fences."""
    text = _complete(prompt)
    data = _extract_json(text)
    if not isinstance(data, dict) or not data.get("name"):
        raise MalformedRemoteResponse("Unexpected structure for smart plate.", payload=text)
    try:
        calories = float(data.get("calories") or 0)
    except (TypeError, ValueError):
        calories = 0.0
    return SmartPlate(
        name=data["name"],
        description=data.get("description") or "",
        calories=calories,
        nutrition=_normalize_nutrition(data.get("nutrition"), text),
        ingredients=[str(i) for i in data.get("ingredients") or []],
        instructions=[str(s) for s in data.get("instructions") or []],
    )


def list_business_names(location: str, kind: str = "restaurant") -> list[str]:
    """Five realistic business names ('restaurant' or 'food bank') for a location."""
    prompt = f"""Generate a list of 5 realistic, existing-sounding names for a {kind} located in "{location}".

Return JSON like {{"names": ["..."]}}, wrapped in ```json``` code fences."""
    try:
        text = _complete(prompt, max_tokens=512)
        names = _require_key(_extract_json(text), "names", list, text)
        return [str(n) for n in names if n]
    except RemoteCallError as e:
        LOGGER.warning("Error fetching %s names: %s; using demo names", kind, e)
        return list(FALLBACK_RESTAURANTS if kind == "restaurant" else FALLBACK_FOOD_BANK_NAMES)


def list_nearby_food_banks(location: str) -> list[NearbyFoodBank]:
    """Five food banks or food rescue organizations near a location."""
    prompt = f"""Find 5 real, major food banks or food rescue organizations near "{location}". For each, provide their name, full address, and approximate latitude and longitude.

Return JSON like:
```json
{{"food_banks": [{{"name": "...", "address": "...", "latitude": 40.7, "longitude": -74.0}}]}}
```
Return only the JSON, wrapped in ```json``` code fences."""
    try:
        text = _complete(prompt)
        entries = _require_key(_extract_json(text), "food_banks", list, text)
        return [
            NearbyFoodBank(
                name=str(e["name"]), address=str(e["address"]),
                latitude=float(e["latitude"]), longitude=float(e["longitude"]),
            )
            for e in entries
        ]
    except (KeyError, TypeError, ValueError) as e:
        LOGGER.warning("Malformed food bank entry: %s; using demo food banks", e)
        return list(FALLBACK_FOOD_BANKS)
    except RemoteCallError as e:
        LOGGER.warning("Error fetching nearby food banks: %s; using demo food banks", e)
        return list(FALLBACK_FOOD_BANKS)


def list_waste_hotspots(location: str) -> list[dict]:
    """Seven restaurant 'food waste hotspots' scattered around a location.

    Returns hotspot dicts without ids; the caller assigns them.
    """
    prompt = f"""You are a food waste analyst. Generate a list of 7 fictional but realistic-sounding restaurant 'food waste hotspots' in "{location}". These are potential partners for food donations. Scatter them geographically across different parts of the city so they spread out on a map. For each, provide name, a plausible full address, approximate latitude and longitude, a waste_score from 1 (low) to 10 (high) for potential food surplus, a fictional contact_email and a fictional contact_phone.

Return JSON like:
```json
{{"hotspots": [{{"name": "...", "address": "...", "latitude": 40.7, "longitude": -74.0, "waste_score": 8, "contact_email": "...", "contact_phone": "..."}}]}}
```
Return only the JSON, wrapped in ```json``` code fences."""
    try:
        text = _complete(prompt, max_tokens=4096)
        entries = _require_key(_extract_json(text), "hotspots", list, text)
        return [
            {
                "name": str(e["name"]),
                "address": str(e["address"]),
                "latitude": float(e["latitude"]),
                "longitude": float(e["longitude"]),
                "waste_score": max(1.0, min(10.0, float(e["waste_score"]))),
                "contact_email": str(e.get("contact_email") or ""),
                "contact_phone": str(e.get("contact_phone") or ""),
            }
            for e in entries
        ]
    except (KeyError, TypeError, ValueError) as e:
        LOGGER.warning("Malformed waste hotspot entry: %s; using demo hotspots", e)
        return [dict(h) for h in FALLBACK_HOTSPOTS]
    except RemoteCallError as e:
        LOGGER.warning("Error fetching waste hotspots: %s; using demo hotspots", e)
        return [dict(h) for h in FALLBACK_HOTSPOTS]


def extract_items_from_image(image: bytes, media_type: str = "image/jpeg", today: date = None) -> list[dict]:
    """Extract food items from a photo of a grocery bill.

    Returns [{"name", "quantity", "category", "expiry_date"}, ...] without ids.
    Entries whose expiry_date is not YYYY-MM-DD are dropped.
    """
    today = today or date.today()
    data = base64.standard_b64encode(image).decode("utf-8")
    content = [
        {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": data}},
        {"type": "text", "text": f"""You are a receipt scanning expert for a pantry management app. Extract all food items from this receipt. For each item provide:
1. name: the name of the item.
2. quantity: the quantity purchased (e.g. '1 lb', '2 cartons'); default to '1 unit'.
3. category: one of {", ".join(CATEGORIES)}.
4. expiry_date: an *estimated* expiry date in YYYY-MM-DD format, assuming a purchase date of {today.isoformat()} (milk/yogurt 7-10 days, fresh meat 3-5 days, bread 5-7 days, berries/lettuce 4-7 days, apples/potatoes 2-4 weeks, canned goods/pasta 1-2 years).

Do not include non-food lines such as bags or tax. Return JSON like:
```json
{{"items": [{{"name": "Milk", "quantity": "1 gallon", "category": "Dairy", "expiry_date": "2024-07-20"}}]}}
```
Return only the JSON, wrapped in ```json``` code fences."""},
    ]
    text = _complete(content, max_tokens=4096)
    entries = _require_key(_extract_json(text), "items", list, text)
    items = []
    for e in entries:
        if not isinstance(e, dict) or not e.get("name") or not is_calendar_date(str(e.get("expiry_date", ""))):
            continue
        items.append({
            "name": str(e["name"]),
            "quantity": str(e.get("quantity") or "1 unit"),
            "category": e.get("category") if e.get("category") in CATEGORIES else "Other",
            "expiry_date": e["expiry_date"],
        })
    return items


def extract_items_from_url(url: str, today: date = None) -> list[dict]:
    """Download a bill photo and extract its food items."""
    try:
        response = httpx.get(url, follow_redirects=True, timeout=15)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise RemoteCallError(f"Failed to fetch image: {e}")
    media_type = response.headers.get("content-type", "image/jpeg").split(";")[0].strip()
    if not media_type.startswith("image/"):
        raise RemoteCallError(f"URL did not return an image (got {media_type}).")
    return extract_items_from_image(response.content, media_type, today=today)


def list_delivery_people(location: str) -> list[DeliveryPerson]:
    """Five plausible local delivery riders with phone numbers."""
    prompt = f"""Generate 5 realistic full names of delivery riders working in "{location}", each with a plausible local phone number.

Return JSON like {{"people": [{{"name": "...", "phone": "..."}}]}}, wrapped in ```json``` code fences."""
    text = _complete(prompt, max_tokens=512)
    entries = _require_key(_extract_json(text), "people", list, text)
    return [
        DeliveryPerson(name=str(e["name"]), phone=str(e["phone"]))
        for e in entries
        if isinstance(e, dict) and e.get("name") and e.get("phone")
    ]
