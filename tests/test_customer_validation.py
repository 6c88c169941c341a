"""
Unit tests for customer field validation.
"""
from app.billing.modules.customers.validation import CustomerInput, ImageUpload, validate_customer


class TestValidateCustomer:
    def test_valid_input_is_trimmed(self):
        customer, errors = validate_customer(CustomerInput(name="  Ada  ", email=" ada@x.com "))
        assert errors == {}
        assert customer.name == "Ada"
        assert customer.email == "ada@x.com"
        assert customer.image is None

    def test_missing_name_and_bad_email_reported_together(self):
        customer, errors = validate_customer(CustomerInput(name="", email="not-an-email"))
        assert customer is None
        assert errors == {"name": ["Name is required"], "email": ["Invalid email address"]}

    def test_whitespace_name_is_empty(self):
        _, errors = validate_customer(CustomerInput(name="   ", email="ada@x.com"))
        assert errors == {"name": ["Name is required"]}

    def test_missing_email(self):
        _, errors = validate_customer(CustomerInput(name="Ada", email=None))
        assert errors == {"email": ["Email is required"]}

    def test_email_pattern(self):
        for bad in ("ada@x", "ada x@x.com", "@x.com", "ada@.com@", "ada@@x.com"):
            _, errors = validate_customer(CustomerInput(name="Ada", email=bad))
            assert errors == {"email": ["Invalid email address"]}, bad
        for good in ("ada@x.com", "a.b+c@mail.example.org"):
            _, errors = validate_customer(CustomerInput(name="Ada", email=good))
            assert errors == {}, good

    def test_image_accepted_as_is(self):
        img = ImageUpload(filename="ada.gif", data=b"not really a gif")
        customer, errors = validate_customer(CustomerInput(name="Ada", email="ada@x.com", image=img))
        assert errors == {}
        assert customer.image is img

    def test_empty_image_counts_as_no_image(self):
        img = ImageUpload(filename="", data=b"")
        customer, _ = validate_customer(CustomerInput(name="Ada", email="ada@x.com", image=img))
        assert customer.image is None

    def test_clear_image_flag_carried(self):
        customer, _ = validate_customer(CustomerInput(name="Ada", email="ada@x.com", clear_image=True))
        assert customer.clear_image is True


class TestImageUpload:
    def test_from_file_storage(self):
        import io

        from werkzeug.datastructures import FileStorage

        fs = FileStorage(stream=io.BytesIO(b"abc"), filename="ada.png", content_type="image/png")
        img = ImageUpload.from_file_storage(fs)
        assert img.filename == "ada.png"
        assert img.data == b"abc"
        assert img.size == 3
        assert img.content_type == "image/png"

    def test_no_file_chosen(self):
        import io

        from werkzeug.datastructures import FileStorage

        assert ImageUpload.from_file_storage(None) is None
        assert ImageUpload.from_file_storage(FileStorage(stream=io.BytesIO(b""), filename="")) is None
