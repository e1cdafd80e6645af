# catalog/data.py
from decimal import Decimal

PRODUCTS = [
    {
        "id": 1,
        "title": "The Pragmatic Reader",
        "subtitle": "Essays on reading well",
        "price": Decimal("24.99"),
        "image_src": "/books/books-1.jpg",
    },
    {
        "id": 2,
        "title": "Night Trains of Europe",
        "subtitle": "A travel memoir",
        "price": Decimal("18.50"),
        "image_src": "/books/books-2.jpg",
    },
    {
        "id": 3,
        "title": "Gardens Without Walls",
        "subtitle": "Landscape design for small spaces",
        "price": Decimal("32.00"),
        "image_src": "/books/books-3.jpg",
    },
    {
        "id": 4,
        "title": "A Short History of Salt",
        "subtitle": "Food, trade and empire",
        "price": Decimal("15.75"),
        "image_src": "/books/books-4.jpg",
    },
    {
        "id": 5,
        "title": "The Quiet Lighthouse",
        "subtitle": "A novel",
        "price": Decimal("12.99"),
        "image_src": "/books/books-5.jpg",
    },
    {
        "id": 6,
        "title": "Field Guide to City Birds",
        "subtitle": "Illustrated edition",
        "price": Decimal("27.40"),
        "image_src": "/books/books-6.jpg",
    },
    {
        "id": 7,
        "title": "Letters from the Archive",
        "subtitle": "Collected correspondence, 1890-1930",
        "price": Decimal("139.99"),
        "image_src": "/books/books-7.jpg",
    },
    {
        "id": 8,
        "title": "Cooking with Smoke",
        "subtitle": "Recipes for the open fire",
        "price": Decimal("21.00"),
        "image_src": "/books/books-8.jpg",
    },
]

# fallback image for products without one
DEFAULT_IMAGE = "/books/books-1.jpg"
