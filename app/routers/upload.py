from fastapi import APIRouter, UploadFile, File, HTTPException, Depends
from app.models.user import User
from app.routers.deps import get_content_service, get_current_user
from app.services.content import ContentService

router = APIRouter()


@router.post("/image")
async def upload_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    content: ContentService = Depends(get_content_service),
):
    """
    Upload a featured image to the Appwrite bucket.
    Returns the file id and its public view URL.
    """
    # Validate file type
    if not file.content_type or not file.content_type.startswith('image/'):
        raise HTTPException(status_code=400, detail="File must be an image")

    # Read file content
    data = await file.read()

    file_id = content.upload_file(file.filename or "image", data, file.content_type)

    return {
        "file_id": file_id,
        "url": content.get_file_preview(file_id),
        "message": "Image uploaded successfully"
    }


@router.delete("/image/{file_id}")
def delete_image(
    file_id: str,
    current_user: User = Depends(get_current_user),
    content: ContentService = Depends(get_content_service),
):
    """
    Delete an image from the Appwrite bucket.
    """
    content.delete_file(file_id)
    return {"message": "Image deleted successfully"}


@router.get("/image/{file_id}/url")
def image_url(file_id: str, content: ContentService = Depends(get_content_service)):
    return {"url": content.get_file_preview(file_id)}
