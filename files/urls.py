from django.urls import path
from .file_ops.CreateFolder import CreateFolderAPIView
from .file_ops.ListFiles import RootContentsAPIView, FolderContentsAPIView
from .file_ops.RenameFolder import RenameFolderAPIView
from .file_ops.RenameFile import RenameFileAPIView
from .file_ops.Search import SearchAPIView, SearchFilesAPIView, SearchFoldersAPIView, RecentFilesAPIView
from .file_ops.Delete import DeleteFolderAPIView, DeleteFileFromFolderAPIView, DeleteFileAPIView
from .file_ops.Upload import MultiFileUploadAPIView
from .file_ops.Download import DownloadFileAPIView, PreviewFileAPIView, DownloadFolderAPIView
from .file_ops.version.FileInfo import FileInfoAPIView
from .file_ops.version.ViewVersions import ListFileVersionsAPIView
from .file_ops.trash.ListTrash import ListTrashAPIView
from .file_ops.trash.Trash import RestoreTrashItemAPIView, RestoreManyAPIView, PurgeTrashItemAPIView, EmptyTrashAPIView
from sharing.views.ResourcePermissions import ResourcePermissionsAPIView

urlpatterns = [
    # Folders
    path('folders/', RootContentsAPIView.as_view(), name='root-contents'),
    path('folders/create/', CreateFolderAPIView.as_view(), name='create-folder'),
    path('folders/<str:folder_uid>/', FolderContentsAPIView.as_view(), name='folder-contents'),
    path('folders/<str:folder_uid>/rename/', RenameFolderAPIView.as_view(), name='rename-folder'),
    path('folders/<str:folder_uid>/delete/', DeleteFolderAPIView.as_view(), name='delete-folder'),
    path('folders/<str:folder_uid>/files/<str:file_uid>/delete/', DeleteFileFromFolderAPIView.as_view(), name='delete-file-from-folder'),
    path('folders/<str:folder_uid>/download/', DownloadFolderAPIView.as_view(), name='download-folder'),

    # Files
    path('upload/', MultiFileUploadAPIView.as_view(), name='file-upload'),
    path('file-info/<str:file_uid>/', FileInfoAPIView.as_view(), name='file-info'),
    path('download/<str:file_uid>/', DownloadFileAPIView.as_view(), name='download-file'),
    path('preview/<str:file_uid>/', PreviewFileAPIView.as_view(), name='preview-file'),
    path('versions/<str:file_uid>/', ListFileVersionsAPIView.as_view(), name='list-file-versions'),
    path('rename/<str:file_uid>/', RenameFileAPIView.as_view(), name='rename-file'),
    path('delete/<str:file_uid>/', DeleteFileAPIView.as_view(), name='delete-file'),
    path('permissions/<str:resource_type>/<str:resource_uid>/', ResourcePermissionsAPIView.as_view(), name='resource-permissions'),

    # Search
    path('search/', SearchAPIView.as_view(), name='search'),
    path('search/files/', SearchFilesAPIView.as_view(), name='search-files'),
    path('search/folders/', SearchFoldersAPIView.as_view(), name='search-folders'),
    path('recent/', RecentFilesAPIView.as_view(), name='recent-files'),

    # Trash
    path('trash/', ListTrashAPIView.as_view(), name='trash-list'),
    path('trash/restore/', RestoreManyAPIView.as_view(), name='trash-restore-many'),
    path('trash/empty/', EmptyTrashAPIView.as_view(), name='trash-empty'),
    path('trash/<str:item_type>/<str:item_uid>/restore/', RestoreTrashItemAPIView.as_view(), name='trash-restore'),
    path('trash/<str:item_type>/<str:item_uid>/', PurgeTrashItemAPIView.as_view(), name='trash-purge'),
]
