"""Review submission: command and handler.

One review per user per product; the product's rating is recomputed from its
reviews on every submission.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class SubmitReview:
    product_id: Identifier(required=True)
    user_id: Identifier(required=True)
    user_name: String(max_length=100)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: String(required=True, max_length=500)


@storefront.command_handler(part_of=Product)
class ReviewSubmissionHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        review = product.add_review(
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
            user_name=command.user_name,
        )
        repo.add(product)
        return str(review.id)
