"""Book lookup, description and related-book endpoints."""

import logging

from flask import Blueprint, current_app, jsonify, request

from src.domain.books import related_books
from src.infrastructure.llm import template_description

logger = logging.getLogger(__name__)

books_bp = Blueprint('books_bp', __name__, url_prefix='/api')


@books_bp.route('/book', methods=['GET'])
def search_books():
    query = (request.args.get('query') or '').strip()
    if not query:
        return jsonify({'error': 'Search query is required'}), 400

    settings = current_app.extensions['settings']
    client = current_app.extensions['google_books']
    books = client.search(query, max_results=settings.google_books_max_results)
    return jsonify([book.model_dump(exclude={'genre'}) for book in books]), 200


@books_bp.route('/generate-description', methods=['POST'])
def generate_description():
    data = request.get_json(silent=True) or {}
    title = (data.get('title') or '').strip()
    if not title:
        return jsonify({'error': 'Book title is required'}), 400

    author = data.get('author') or None
    genre = data.get('genre') or None
    additional_info = data.get('additionalInfo') or None

    curator = current_app.extensions.get('curator')
    if curator is None:
        description = template_description(title, author, genre, additional_info)
    else:
        description = curator.generate_description(title, author, genre, additional_info)
    return jsonify({'description': description}), 200


@books_bp.route('/book-recommendations', methods=['POST'])
def book_recommendations():
    data = request.get_json(silent=True) or {}
    title = (data.get('title') or '').strip()
    if not title:
        return jsonify({'error': 'Book title is required'}), 400

    recommendations = related_books(title, data.get('author'), data.get('genre'))
    return jsonify({'recommendations': recommendations}), 200
