# store/api/reviews.py
from ..schemas import Review
from .client import parse_list


def get_reviews(client, product_id):
    return parse_list(Review, client.get(f"/reviews/product/{product_id}"))


def can_review(client, product_id):
    data = client.get(f"/reviews/product/{product_id}/purchased")
    if isinstance(data, dict):
        return bool(data.get("canReview", data.get("purchased", False)))
    return bool(data)


def post_review(client, product_id, rating, review_text):
    return client.post(f"/reviews/product/{product_id}", {
        "rating": int(rating),
        "reviewText": review_text,
    })
