"""Built-in dialogs of the hotel bot."""

import random

from ..logging_config import get_logger
from ..models import NONE_INTENT, IntentResult
from ..presentation import hotel_as_card, review_as_card
from .context import Interruption, StepContext, StepResult
from .entities import find_entity, find_first_entity
from .registry import DialogDefinition, DialogRegistry

logger = get_logger(__name__)

# Dialog names
WELCOME = "welcome"
FALLBACK = NONE_INTENT
OVERSEAS_FAIRS = "Hktdc_Overseas_Fairs"
HELP = "Help"
SEARCH_HOTELS = "SearchHotels"
SHOW_REVIEWS = "ShowHotelsReviews"

# Entity types
CITY_ENTITY = "builtin.geography.city"
AIRPORT_ENTITY = "AirportCode"
HOTEL_ENTITY = "Hotel"
ENTITY_TYPES = (CITY_ENTITY, AIRPORT_ENTITY, HOTEL_ENTITY)

WELCOME_LINES = (
    "Welcome to the HKTDC bot. How can I help you?",
    "I am HKTDC Bot. Let me help you.",
    "What would you like to look for?",
)

NOT_UNDERSTOOD = (
    "Sorry, we can't understand. Message is sent to our support team via email. "
    "Thank you for your enquiry."
)

OVERSEAS_FAIRS_TEXT = (
    "You can find HKTDC Worldwide Trade Events by clicking "
    "[here](http://www.hktdc.com/info/trade-events/ci/TDCWORLD-upcoming/en/"
    "HKTDC-Worldwide-Trade-Events.html)."
)

HELP_TEXT = (
    "Hi! Try asking me things like 'search hotels in Seattle', "
    "'search hotels near LAX airport' or 'show me the reviews of The Bot Resort'"
)

DESTINATION_PROMPT = "Please enter your destination"
PROVIDE_DESTINATION = "Please provide a destination"
HOTEL_NAME_PROMPT = "Which hotel would you like to see reviews for?"


def time_greeting(hour: int) -> str:
    if hour < 12:
        return "Good Morning!"
    if hour < 18:
        return "Good Afternoon!"
    return "Good Evening!"


def choose_welcome_line(rng: random.Random) -> str:
    return rng.choice(WELCOME_LINES)


def _entities(value) -> tuple:
    return value.entities if isinstance(value, IntentResult) else ()


# welcome
async def welcome(ctx: StepContext, _value) -> StepResult:
    ctx.typing()
    ctx.pause(2)
    ctx.send(time_greeting(ctx.now.hour))
    ctx.typing()
    ctx.pause(3)
    ctx.send(choose_welcome_line(ctx.services.rng))
    return ctx.end()


# None
async def not_understood(ctx: StepContext, _value) -> StepResult:
    ctx.typing()
    ctx.send(NOT_UNDERSTOOD)
    ctx.pause(3)
    return ctx.replace_dialog(WELCOME)


# Hktdc_Overseas_Fairs
async def overseas_fairs(ctx: StepContext, _value) -> StepResult:
    ctx.typing()
    ctx.pause(2)
    ctx.send(OVERSEAS_FAIRS_TEXT)
    return ctx.end()


# Help
async def show_help(ctx: StepContext, _value) -> StepResult:
    ctx.send(HELP_TEXT)
    return ctx.end()


# SearchHotels
async def ask_destination(ctx: StepContext, intent) -> StepResult:
    ctx.send(
        f"Welcome to the Hotels finder! We are analyzing your message: '{ctx.message.text}'"
    )

    match = find_first_entity(_entities(intent), CITY_ENTITY, AIRPORT_ENTITY)
    if match is None:
        return ctx.prompt(DESTINATION_PROMPT)

    entity_type, entity = match
    ctx.dialog_data["searchType"] = "city" if entity_type == CITY_ENTITY else "airport"
    return ctx.next(entity.value)


async def search_hotels(ctx: StepContext, destination: str) -> StepResult:
    destination = destination.strip()
    if ctx.dialog_data.get("searchType") == "airport":
        place = f"near {destination} airport"
    else:
        place = f"in {destination}"
    ctx.send(f"Looking for hotels {place}...")

    try:
        hotels = await ctx.wait_for(ctx.services.store.search_hotels(destination))
    except Exception as e:
        logger.warning("Hotel search for %r failed: %s", destination, e)
        ctx.send(f"Sorry, I could not find any hotels {place} right now.")
        return ctx.end()

    ctx.send(f"I found {len(hotels)} hotels:")
    ctx.send_cards([hotel_as_card(hotel) for hotel in hotels])
    return ctx.end()


async def search_hotels_interrupted(ctx: StepContext, dialog: str) -> Interruption:
    ctx.send(PROVIDE_DESTINATION)
    return Interruption.DEFER


# ShowHotelsReviews
async def ask_hotel_name(ctx: StepContext, intent) -> StepResult:
    entity = find_entity(_entities(intent), HOTEL_ENTITY)
    if entity is None:
        return ctx.prompt(HOTEL_NAME_PROMPT)
    return ctx.next(entity.value)


async def show_reviews(ctx: StepContext, hotel_name: str) -> StepResult:
    hotel_name = hotel_name.strip()
    ctx.send(f"Looking for reviews of '{hotel_name}'...")

    try:
        reviews = await ctx.wait_for(ctx.services.store.search_hotel_reviews(hotel_name))
    except Exception as e:
        logger.warning("Review lookup for %r failed: %s", hotel_name, e)
        ctx.send(f"Sorry, I could not find any reviews of '{hotel_name}'.")
        return ctx.end()

    ctx.send_cards([review_as_card(review) for review in reviews])
    return ctx.end()


async def show_reviews_interrupted(ctx: StepContext, dialog: str) -> Interruption:
    return Interruption.ALLOW


def build_registry() -> DialogRegistry:
    """Create the registry with every built-in dialog."""
    return DialogRegistry(
        [
            DialogDefinition(name=WELCOME, steps=(welcome,)),
            DialogDefinition(name=FALLBACK, steps=(not_understood,), trigger=NONE_INTENT),
            DialogDefinition(
                name=OVERSEAS_FAIRS, steps=(overseas_fairs,), trigger=OVERSEAS_FAIRS
            ),
            DialogDefinition(name=HELP, steps=(show_help,), trigger=HELP),
            DialogDefinition(
                name=SEARCH_HOTELS,
                steps=(ask_destination, search_hotels),
                trigger=SEARCH_HOTELS,
                on_interrupted=search_hotels_interrupted,
            ),
            DialogDefinition(
                name=SHOW_REVIEWS,
                steps=(ask_hotel_name, show_reviews),
                trigger=SHOW_REVIEWS,
                on_interrupted=show_reviews_interrupted,
            ),
        ],
        fallback=FALLBACK,
    )

