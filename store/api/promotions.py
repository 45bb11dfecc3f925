# store/api/promotions.py
from ..schemas import Promotion
from .client import parse, parse_list

SORT_FIELDS = ("startedAt", "expiresAt", "updatedAt", "title")


def get_promotions(client, search=None, active=None, date_from=None, date_to=None,
                   sort_by=None, sort_order=None):
    params = {
        "search": search,
        "active": active,
        "dateFrom": date_from,
        "dateTo": date_to,
        "sortBy": sort_by if sort_by in SORT_FIELDS else None,
        "sortOrder": sort_order,
    }
    return parse_list(Promotion, client.get("/promotions", params=params))


def get_promotion(client, promotion_id):
    return parse(Promotion, client.get(f"/promotions/{promotion_id}"))


def _payload(title=None, image=None, description=None, started_at=None, expires_at=None):
    payload = {
        "title": title,
        "image": image,
        "description": description,
        "startedAt": started_at.isoformat() if started_at else None,
        "expiresAt": expires_at.isoformat() if expires_at else None,
    }
    return {k: v for k, v in payload.items() if v is not None}


def create_promotion(client, title, image, started_at, expires_at, description=None):
    data = client.post("/promotions", _payload(title, image, description, started_at, expires_at))
    return parse(Promotion, data)


def update_promotion(client, promotion_id, **fields):
    return parse(Promotion, client.patch(f"/promotions/{promotion_id}", _payload(**fields)))


def delete_promotion(client, promotion_id):
    client.delete(f"/promotions/{promotion_id}")
