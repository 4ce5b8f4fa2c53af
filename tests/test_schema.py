"""
Record models keep what Zammad sent
"""
from zammad_mcp.schema import Article, Tag, TextModule, Ticket, User


class TestRoundTrip:
    """Parsing then serializing returns the backend payload unchanged"""

    def test_ticket(self, ticket_data):
        assert Ticket.model_validate(ticket_data).to_dict() == ticket_data

    def test_article_with_from_and_null_subject(self, article_data):
        assert Article.model_validate(article_data).to_dict() == article_data

    def test_user_with_custom_fields(self, user_data):
        assert User.model_validate(user_data).to_dict() == user_data

    def test_numeric_ticket_number(self):
        data = {"id": 1, "number": 31001}
        assert Ticket.model_validate(data).to_dict() == data

    def test_tag_from_name_only(self):
        assert Tag(name="vip").to_dict() == {"name": "vip"}


class TestTextModule:
    """Text modules use a fixed field set"""

    def test_defaults(self):
        module = TextModule.model_validate({"id": 5})

        assert module.name == ""
        assert module.keywords == ""
        assert module.active is True
        assert module.group_ids == []

    def test_null_keywords_preserved(self, text_modules_data):
        module = TextModule.model_validate(text_modules_data[2])

        assert module.keywords is None
        assert module.to_dict() == text_modules_data[2]
