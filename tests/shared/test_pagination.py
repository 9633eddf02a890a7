from storefront.shared.pagination import Page


class TestPage:
    def test_metadata_names_the_total_after_the_noun(self):
        page = Page(items=[], total=25, page=2, limit=10)

        assert page.metadata("products") == {
            "current_page": 2,
            "total_pages": 3,
            "total_products": 25,
            "has_next": True,
            "has_prev": True,
        }

    def test_single_page(self):
        page = Page(items=[], total=3, page=1, limit=10)
        assert page.total_pages == 1
        assert not page.has_next
        assert not page.has_prev

    def test_empty_result(self):
        assert Page(items=[], total=0, page=1, limit=10).total_pages == 0
