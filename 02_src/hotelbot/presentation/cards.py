"""Card rendering of search results."""

from urllib.parse import quote_plus

from ..models import Card, CardAction, Hotel, Review


def hotel_as_card(hotel: Hotel) -> Card:
    return Card(
        kind="hero",
        title=hotel.name,
        subtitle=(
            f"{hotel.rating} stars. {hotel.number_of_reviews} reviews. "
            f"From ${hotel.price_starting} per night."
        ),
        images=[hotel.image],
        buttons=[
            CardAction(
                type="openUrl",
                title="More details",
                value=f"https://www.bing.com/search?q=hotels+in+{quote_plus(hotel.location)}",
            )
        ],
    )


def review_as_card(review: Review) -> Card:
    return Card(
        kind="thumbnail",
        title=review.title,
        text=review.text,
        images=[review.image],
    )
