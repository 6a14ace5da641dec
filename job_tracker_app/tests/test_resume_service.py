"""
Test resume uploads, defaults and deletion.
"""
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from backend import schemas
from backend.exceptions import NotFoundError, StoreError, ValidationError
from backend.models.db.resume import Resume
from backend.services import resume_service
from backend.services.blob_storage import LocalBlobStorage


class TestUploadValidation:
    """Checks run before anything is stored."""

    def test_valid_upload_returns_base_name(self, sample_pdf_bytes):
        assert resume_service.validate_resume_upload(
            "../../etc/cv.pdf", sample_pdf_bytes, "My CV"
        ) == "cv.pdf"

    @pytest.mark.parametrize("file_name, content, name, field", [
        ("cv.pdf", b"data", "", "name"),
        ("cv.pdf", b"data", "   ", "name"),
        ("", b"data", "My CV", "file"),
        ("cv.exe", b"data", "My CV", "file"),
        ("cv.pdf", b"", "My CV", "file"),
    ])
    def test_invalid_uploads(self, file_name, content, name, field):
        with pytest.raises(ValidationError) as exc_info:
            resume_service.validate_resume_upload(file_name, content, name)
        assert exc_info.value.field == field

    def test_oversized_upload(self, override_settings):
        override_settings(max_file_size=10)
        with pytest.raises(ValidationError, match="maximum size"):
            resume_service.validate_resume_upload("cv.txt", b"x" * 11, "My CV")


class TestUpload:
    """Storing the file and its metadata."""

    def test_upload_stores_file_and_metadata(self, test_db_session, test_user, blob_storage, sample_pdf_bytes):
        resume = resume_service.upload_resume(
            test_db_session, blob_storage, user_id=test_user.id, file_name="cv.pdf",
            content=sample_pdf_bytes, content_type="application/pdf", name="  Backend CV  ",
        )

        assert resume.name == "Backend CV"
        assert resume.file_name == "cv.pdf"
        assert resume.file_size == len(sample_pdf_bytes)
        assert resume.version == "1.0"
        assert resume.is_default is False
        assert resume.file_path.startswith(f"{test_user.id}/")
        assert resume.file_path.endswith("_cv.pdf")
        assert (blob_storage.root / resume.file_path).read_bytes() == sample_pdf_bytes

    def test_storage_failure_writes_no_metadata(self, test_db_session, test_user, sample_pdf_bytes):
        storage = Mock()
        storage.upload.side_effect = OSError("disk full")

        with pytest.raises(StoreError, match="Failed to upload resume"):
            resume_service.upload_resume(
                test_db_session, storage, user_id=test_user.id, file_name="cv.pdf",
                content=sample_pdf_bytes, content_type="application/pdf", name="CV",
            )
        assert test_db_session.query(Resume).count() == 0

    def test_metadata_failure_removes_blob(self, test_db_session, test_user, sample_pdf_bytes):
        storage = Mock()
        storage.upload.side_effect = lambda path, data, content_type: path
        with patch.object(test_db_session, "commit", side_effect=SQLAlchemyError("insert failed")):
            with pytest.raises(StoreError):
                resume_service.upload_resume(
                    test_db_session, storage, user_id=test_user.id, file_name="cv.pdf",
                    content=sample_pdf_bytes, content_type="application/pdf", name="CV",
                )

        stored_path = storage.upload.call_args[0][0]
        storage.remove.assert_called_once_with(stored_path)


class TestDefaultResume:
    """Exactly one default resume per user."""

    def test_switching_default(self, test_db_session, test_user, make_resume):
        first = make_resume(test_user, "First", is_default=True)
        second = make_resume(test_user, "Second")

        resume_service.set_default_resume(test_db_session, user_id=test_user.id, resume_id=second.id)

        defaults = test_db_session.query(Resume).filter(Resume.is_default.is_(True)).all()
        assert [r.id for r in defaults] == [second.id]
        test_db_session.refresh(first)
        assert first.is_default is False
        assert resume_service.get_default_resume(test_db_session, user_id=test_user.id).id == second.id

    def test_other_users_default_untouched(self, test_db_session, test_user, other_user, make_resume):
        theirs = make_resume(other_user, "Theirs", is_default=True)
        mine = make_resume(test_user, "Mine")

        resume_service.set_default_resume(test_db_session, user_id=test_user.id, resume_id=mine.id)

        test_db_session.refresh(theirs)
        assert theirs.is_default is True

    def test_cannot_default_foreign_resume(self, test_db_session, test_user, other_user, make_resume):
        theirs = make_resume(other_user, "Theirs")
        with pytest.raises(NotFoundError):
            resume_service.set_default_resume(test_db_session, user_id=test_user.id, resume_id=theirs.id)

    def test_update_with_default_flag(self, test_db_session, test_user, make_resume):
        first = make_resume(test_user, "First", is_default=True)
        second = make_resume(test_user, "Second")

        updated = resume_service.update_resume(
            test_db_session, resume_id=second.id, user_id=test_user.id,
            updates=schemas.ResumeUpdate(name="Renamed", is_default=True),
        )

        assert updated.name == "Renamed"
        assert updated.is_default is True
        test_db_session.refresh(first)
        assert first.is_default is False


class TestDeleteResume:
    """Deleting metadata and the stored file."""

    def test_delete_removes_file_and_row(self, test_db_session, test_user, blob_storage, sample_pdf_bytes):
        resume = resume_service.upload_resume(
            test_db_session, blob_storage, user_id=test_user.id, file_name="cv.pdf",
            content=sample_pdf_bytes, content_type="application/pdf", name="CV",
        )
        stored = blob_storage.root / resume.file_path

        resume_service.delete_resume(test_db_session, blob_storage, user_id=test_user.id, resume_id=resume.id)

        assert not stored.exists()
        assert test_db_session.query(Resume).count() == 0

    def test_missing_blob_does_not_block_delete(self, test_db_session, test_user, make_resume, tmp_path):
        resume = make_resume(test_user, file_path="1/never-uploaded.pdf")

        resume_service.delete_resume(
            test_db_session, LocalBlobStorage(tmp_path), user_id=test_user.id, resume_id=resume.id
        )

        assert test_db_session.query(Resume).count() == 0

    def test_delete_unknown_resume(self, test_db_session, test_user, blob_storage):
        with pytest.raises(NotFoundError):
            resume_service.delete_resume(test_db_session, blob_storage, user_id=test_user.id, resume_id=42)


class TestDownloadResume:
    """Reading a resume back from storage."""

    def test_download_returns_metadata_and_bytes(self, test_db_session, test_user, blob_storage, sample_pdf_bytes):
        uploaded = resume_service.upload_resume(
            test_db_session, blob_storage, user_id=test_user.id, file_name="cv.pdf",
            content=sample_pdf_bytes, content_type="application/pdf", name="CV",
        )

        resume, data = resume_service.download_resume(
            test_db_session, blob_storage, user_id=test_user.id, resume_id=uploaded.id
        )

        assert resume.id == uploaded.id
        assert data == sample_pdf_bytes

    def test_missing_blob_is_a_store_error(self, test_db_session, test_user, make_resume, tmp_path):
        resume = make_resume(test_user, file_path="1/never-uploaded.pdf")

        with pytest.raises(StoreError, match="Failed to download resume"):
            resume_service.download_resume(
                test_db_session, LocalBlobStorage(tmp_path), user_id=test_user.id, resume_id=resume.id
            )

    def test_foreign_resume_not_found(self, test_db_session, test_user, other_user, make_resume):
        theirs = make_resume(other_user, "Theirs")
        storage = Mock()

        with pytest.raises(NotFoundError):
            resume_service.download_resume(test_db_session, storage, user_id=test_user.id, resume_id=theirs.id)
        storage.read.assert_not_called()


class TestLocalBlobStorage:
    """Filesystem-backed blob storage."""

    def test_rejects_paths_outside_root(self, tmp_path):
        storage = LocalBlobStorage(tmp_path / "root")
        with pytest.raises(ValueError):
            storage.upload("../escape.pdf", b"data", "application/pdf")

    def test_refuses_to_overwrite(self, tmp_path):
        storage = LocalBlobStorage(tmp_path)
        storage.upload("1/cv.pdf", b"data", "application/pdf")
        with pytest.raises(FileExistsError):
            storage.upload("1/cv.pdf", b"other", "application/pdf")

    def test_read_returns_stored_bytes(self, tmp_path):
        storage = LocalBlobStorage(tmp_path)
        storage.upload("1/cv.pdf", b"data", "application/pdf")
        assert storage.read("1/cv.pdf") == b"data"

    def test_read_rejects_paths_outside_root(self, tmp_path):
        (tmp_path / "secret.txt").write_bytes(b"secret")
        storage = LocalBlobStorage(tmp_path / "root")
        with pytest.raises(ValueError):
            storage.read("../secret.txt")
