import base64
from io import BytesIO

import pytest
from PIL import Image

from hometour.survey import new_record


def make_photo(width: int = 8, height: int = 6, color: str = "red", fmt: str = "PNG") -> str:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    mime = "image/png" if fmt == "PNG" else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


@pytest.fixture
def photo_uri():
    return make_photo()


@pytest.fixture
def sample_record(photo_uri):
    record = new_record()
    record.update(
        {
            "email": "buyer@example.com",
            "address": "Kerkstraat 1",
            "date": "2024-05-01",
            "firstWelcomeRating": 5,
            "firstEntranceRating": 5,
            "firstImpressionThoughts": "Bright hallway, fresh paint.",
            "livingComfortRating": 2,
            "kitchenOverallRating": 4,
            "bedroomNoise": 5,
            "bathroomPlumbingChecklist": ["No leaks", "Hot water ok"],
            "makelaarReasonLeaving": "Moving abroad",
            "livingPhotos": [photo_uri, photo_uri],
        }
    )
    return record
