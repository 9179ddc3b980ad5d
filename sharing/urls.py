from django.urls import path
from sharing.views.Share import ShareFileOrFolderAPIView, BulkShareAPIView
from sharing.views.SharedWithMe import SharedWithMeAPIView, SharedByMeAPIView, AllSharedAPIView
from sharing.views.ManageShare import ManageShareAPIView

urlpatterns = [
    path('share/', ShareFileOrFolderAPIView.as_view(), name='share-file-folder'),
    path('bulk-share/', BulkShareAPIView.as_view(), name='bulk-share'),
    path('shared-with-me/', SharedWithMeAPIView.as_view(), name='shared-with-me'),
    path('shared-by-me/', SharedByMeAPIView.as_view(), name='shared-by-me'),
    path('all/', AllSharedAPIView.as_view(), name='all-shared'),
    path('shares/<str:share_uid>/', ManageShareAPIView.as_view(), name='manage-share'),
]
